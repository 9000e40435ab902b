"""
Route definitions for the catalogue API.

Endpoints under /api/products:
- GET    /                       : search/filter/sort/paginate products
- GET    /artisan/{artisan_id}   : every product of one artisan
- GET    /category/{category}    : every product of one category
- GET    /{product_id}           : one product
- POST   /                       : create a product
- PUT    /{product_id}           : partial update
- DELETE /{product_id}           : delete

Endpoints under /api/artisans mirror these, plus
GET /{artisan_id}/products.

Paging and filter parameters are taken as raw strings and handed to the
query engine. Junk like ``page=abc`` falls back to the default, an empty
``minPrice=`` means no constraint, and an unreadable filter value such
as ``minPrice=abc`` raises ``InvalidDescriptor``, which the app turns
into a 400 ``{"success": false, "error": ...}``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..storage import Repository
from .query import ARTISAN_PROFILE, PRODUCT_PROFILE, QueryDescriptor, QueryResult, run_query
from .schemas import (
    Artisan,
    ArtisanCreate,
    ArtisanUpdate,
    ItemList,
    ItemResponse,
    MessageResponse,
    Paginated,
    Product,
    ProductCreate,
    ProductUpdate,
)
from .store import get_artisan_repository, get_product_repository

products_router = APIRouter(prefix="/api/products", tags=["products"])
artisans_router = APIRouter(prefix="/api/artisans", tags=["artisans"])


def _paginated(result: QueryResult) -> dict:
    return {
        "success": True,
        "count": len(result.items),
        "total": result.total_matched,
        "page": result.page,
        "pages": result.total_pages,
        "data": result.items,
    }


# ---------------------------------------------------------------------------
# Products


@products_router.get("", response_model=Paginated[Product])
def list_products(
    search: Optional[str] = Query(default=None, description="Text search (title/description/tags)"),
    category: Optional[str] = Query(default=None),
    artisan: Optional[str] = Query(default=None, description="Artisan id"),
    status_: Optional[str] = Query(default=None, alias="status"),
    location: Optional[str] = Query(default=None),
    min_price: Optional[str] = Query(default=None, alias="minPrice"),
    max_price: Optional[str] = Query(default=None, alias="maxPrice"),
    min_rating: Optional[str] = Query(default=None, alias="minRating"),
    in_stock: Optional[str] = Query(default=None, alias="inStock"),
    featured: Optional[str] = Query(default=None),
    sort: str = Query(default="createdAt"),
    order: str = Query(default="desc"),
    page: Optional[str] = Query(default="1"),
    limit: Optional[str] = Query(default=None),
    repo: Repository[Product] = Depends(get_product_repository),
):
    descriptor = QueryDescriptor(
        search=search,
        filters={
            "category": category,
            "artisanId": artisan,
            "status": status_,
            "location": location,
            "minPrice": min_price,
            "maxPrice": max_price,
            "minRating": min_rating,
            "inStock": in_stock,
            "featured": featured,
        },
        sort_field=sort,
        sort_order=order,
        page=page,
        limit=limit,
    )
    return _paginated(run_query(repo.list(), descriptor, PRODUCT_PROFILE))


@products_router.get("/artisan/{artisan_id}", response_model=ItemList[Product])
def list_artisan_products(
    artisan_id: str, repo: Repository[Product] = Depends(get_product_repository)
):
    items = [p for p in repo.list() if p.artisan_id == artisan_id]
    return {"count": len(items), "data": items}


@products_router.get("/category/{category}", response_model=ItemList[Product])
def list_category_products(
    category: str, repo: Repository[Product] = Depends(get_product_repository)
):
    wanted = category.lower()
    items = [p for p in repo.list() if p.category.lower() == wanted]
    return {"count": len(items), "data": items}


@products_router.get("/{product_id}", response_model=ItemResponse[Product])
def get_product(product_id: str, repo: Repository[Product] = Depends(get_product_repository)):
    product = repo.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"data": product}


@products_router.post(
    "", response_model=ItemResponse[Product], status_code=status.HTTP_201_CREATED
)
def create_product(
    payload: ProductCreate, repo: Repository[Product] = Depends(get_product_repository)
):
    fields = payload.model_dump()
    product = Product(
        id=repo.next_id(),
        in_stock=payload.stock_quantity > 0,
        created_at=datetime.now(timezone.utc),
        featured=False,
        rating=0.0,
        review_count=0,
        **fields,
    )
    repo.insert(product)
    return {"data": product, "message": "Product created successfully"}


@products_router.put("/{product_id}", response_model=ItemResponse[Product])
def update_product(
    product_id: str,
    payload: ProductUpdate,
    repo: Repository[Product] = Depends(get_product_repository),
):
    try:
        product = repo.update(product_id, payload.changes())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"data": product, "message": "Product updated successfully"}


@products_router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(product_id: str, repo: Repository[Product] = Depends(get_product_repository)):
    if not repo.delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted successfully"}


# ---------------------------------------------------------------------------
# Artisans


@artisans_router.get("", response_model=Paginated[Artisan])
def list_artisans(
    search: Optional[str] = Query(default=None, description="Text search (name/description/skills)"),
    location: Optional[str] = Query(default=None),
    specialty: Optional[str] = Query(default=None),
    rating: Optional[str] = Query(default=None, description="Minimum average rating"),
    verified: Optional[str] = Query(default=None),
    sort: str = Query(default="joinedDate"),
    order: str = Query(default="desc"),
    page: Optional[str] = Query(default="1"),
    limit: Optional[str] = Query(default=None),
    repo: Repository[Artisan] = Depends(get_artisan_repository),
):
    descriptor = QueryDescriptor(
        search=search,
        filters={
            "location": location,
            "specialty": specialty,
            "minRating": rating,
            "verified": verified,
        },
        sort_field=sort,
        sort_order=order,
        page=page,
        limit=limit,
    )
    return _paginated(run_query(repo.list(), descriptor, ARTISAN_PROFILE))


@artisans_router.get("/{artisan_id}", response_model=ItemResponse[Artisan])
def get_artisan(artisan_id: str, repo: Repository[Artisan] = Depends(get_artisan_repository)):
    artisan = repo.get(artisan_id)
    if artisan is None:
        raise HTTPException(status_code=404, detail="Artisan not found")
    return {"data": artisan}


@artisans_router.get("/{artisan_id}/products", response_model=ItemList[Product])
def get_artisan_products(
    artisan_id: str,
    artisans: Repository[Artisan] = Depends(get_artisan_repository),
    products: Repository[Product] = Depends(get_product_repository),
):
    if artisans.get(artisan_id) is None:
        raise HTTPException(status_code=404, detail="Artisan not found")
    items = [p for p in products.list() if p.artisan_id == artisan_id]
    return {"count": len(items), "data": items}


@artisans_router.post(
    "", response_model=ItemResponse[Artisan], status_code=status.HTTP_201_CREATED
)
def create_artisan(
    payload: ArtisanCreate, repo: Repository[Artisan] = Depends(get_artisan_repository)
):
    artisan = Artisan(
        id=repo.next_id(),
        rating=0.0,
        total_products=0,
        verified=False,
        joined_date=datetime.now(timezone.utc),
        **payload.model_dump(),
    )
    repo.insert(artisan)
    return {"data": artisan, "message": "Artisan profile created successfully"}


@artisans_router.put("/{artisan_id}", response_model=ItemResponse[Artisan])
def update_artisan(
    artisan_id: str,
    payload: ArtisanUpdate,
    repo: Repository[Artisan] = Depends(get_artisan_repository),
):
    try:
        artisan = repo.update(artisan_id, payload.changes())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if artisan is None:
        raise HTTPException(status_code=404, detail="Artisan not found")
    return {"data": artisan, "message": "Artisan profile updated successfully"}


@artisans_router.delete("/{artisan_id}", response_model=MessageResponse)
def delete_artisan(artisan_id: str, repo: Repository[Artisan] = Depends(get_artisan_repository)):
    if not repo.delete(artisan_id):
        raise HTTPException(status_code=404, detail="Artisan not found")
    return {"message": "Artisan profile deleted successfully"}
