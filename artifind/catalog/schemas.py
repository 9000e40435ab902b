"""
Pydantic schema definitions for the catalog module.

``Product`` and ``Artisan`` are the records the query engine works on.
Attributes are snake_case in Python and camelCase on the wire, so the
front-end keeps receiving ``inStock``, ``artisanId``, ``createdAt`` and
so on. Validation is also where raw seed or request data gets
normalised: prices written as currency strings become floats and the
nested artisan rating is flattened, so the engine only ever sees
well-typed values.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def parse_price(value: Any) -> Optional[float]:
    """Convert a price given as a number or a string such as ``"$1,089.99"``.

    ``None`` and empty strings mean "no price". Anything else that cannot
    be read as a number raises ``ValueError``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("price must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "")
        if not cleaned:
            return None
        try:
            return float(cleaned)
        except ValueError:
            raise ValueError(f"cannot read price from {value!r}") from None
    raise ValueError("price must be a number")


class CatalogModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(CatalogModel):
    """A single craft item listed by an artisan."""

    id: str
    title: str
    description: str = ""
    # Display name of the artisan, denormalised for catalogue cards
    artisan: Optional[str] = None
    artisan_id: Optional[str] = None
    location: Optional[str] = None
    category: str = ""
    price: Optional[float] = None
    image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    in_stock: bool = True
    stock_quantity: int = 0
    rating: float = 0.0
    review_count: int = 0
    featured: bool = False
    status: str = "active"
    materials: List[str] = Field(default_factory=list)
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("price", mode="before")
    @classmethod
    def _normalise_price(cls, value: Any) -> Optional[float]:
        return parse_price(value)


class Artisan(CatalogModel):
    """An artisan profile."""

    id: str
    name: str
    specialty: str = ""
    location: str = ""
    description: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    rating: float = 0.0
    review_count: int = 0
    total_products: int = 0
    verified: bool = False
    joined_date: Optional[datetime] = None
    skills: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_rating(cls, data: Any) -> Any:
        # Seed data stores ratings as {"average": 4.8, "count": 156}
        if isinstance(data, dict) and isinstance(data.get("rating"), dict):
            data = dict(data)
            nested = data.pop("rating")
            data["rating"] = nested.get("average") or 0.0
            if "count" in nested and "reviewCount" not in data and "review_count" not in data:
                data["reviewCount"] = nested.get("count") or 0
        return data


class ProductCreate(CatalogModel):
    title: str
    description: str
    artisan_id: str
    category: str
    price: float
    artisan: Optional[str] = None
    location: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    stock_quantity: int = 0
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    materials: List[str] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def _normalise_price(cls, value: Any) -> Optional[float]:
        return parse_price(value)

    @field_validator("title", "description", "artisan_id", "category")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ProductUpdate(CatalogModel):
    """Partial update; only the fields a client actually sends are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    artisan: Optional[str] = None
    artisan_id: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    stock_quantity: Optional[int] = None
    featured: Optional[bool] = None
    status: Optional[str] = None
    materials: Optional[List[str]] = None
    dimensions: Optional[str] = None
    weight: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _normalise_price(cls, value: Any) -> Optional[float]:
        return parse_price(value)

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude_none=True)
        if data.get("stock_quantity") is not None:
            data["in_stock"] = data["stock_quantity"] > 0
        return data


class ArtisanCreate(CatalogModel):
    name: str
    specialty: str
    location: str
    description: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    skills: List[str] = Field(default_factory=list)

    @field_validator("name", "specialty", "location")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ArtisanUpdate(CatalogModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    skills: Optional[List[str]] = None
    verified: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


T = TypeVar("T")


class Paginated(BaseModel, Generic[T]):
    """Response of the list endpoints: one page plus pagination metadata."""

    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: List[T]


class ItemList(BaseModel, Generic[T]):
    success: bool = True
    count: int
    data: List[T]


class ItemResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
