"""
Data store for the catalogue API.

The product and artisan repositories are populated at import time from
the seed files in ``data/`` (or ``ARTIFIND_DATA_DIR``). Each raw entry
goes through the ``Product``/``Artisan`` schemas, so seed prices like
``"$89.99"`` are numbers by the time anything queries them.

Routes never touch the module-level repositories directly; they ask for
them through ``get_product_repository`` / ``get_artisan_repository`` so
tests (or a future database backend) can swap them out with FastAPI's
dependency overrides.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import settings
from ..storage import InMemoryRepository, Repository
from .schemas import Artisan, Product

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def load_records(path: Path, model: Type[M]) -> List[M]:
    """Load and validate seed records from a JSON array file.

    A missing or unreadable file yields an empty list; entries that fail
    validation are skipped. Both are logged.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.warning("Seed file %s not found, starting with no %s records", path, model.__name__)
        return []
    except (OSError, ValueError) as exc:
        logger.error("Could not read seed file %s: %s", path, exc)
        return []

    if not isinstance(raw, list):
        logger.error("Seed file %s must contain a JSON array", path)
        return []

    records: List[M] = []
    for entry in raw:
        try:
            records.append(model.model_validate(entry))
        except ValidationError as exc:
            entry_id = entry.get("id") if isinstance(entry, dict) else None
            logger.warning("Skipping invalid %s %r: %s", model.__name__, entry_id, exc)
    logger.info("Loaded %d %s records from %s", len(records), model.__name__, path.name)
    return records


def build_product_repository(data_dir: Path = settings.data_dir) -> Repository[Product]:
    return InMemoryRepository(Product, load_records(data_dir / "products.json", Product))


def build_artisan_repository(data_dir: Path = settings.data_dir) -> Repository[Artisan]:
    return InMemoryRepository(Artisan, load_records(data_dir / "artisans.json", Artisan))


PRODUCTS: Repository[Product] = build_product_repository()
ARTISANS: Repository[Artisan] = build_artisan_repository()


def get_product_repository() -> Repository[Product]:
    return PRODUCTS


def get_artisan_repository() -> Repository[Artisan]:
    return ARTISANS
