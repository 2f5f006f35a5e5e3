# app/domain/repositories/product_repo.py

from __future__ import annotations
from contextlib import contextmanager
from typing import Optional, List, Any, Dict
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from app.domain.errors import StoreError
from app.domain.models.product import Product
from app.domain.models.query import QueryOptions
from app.domain.services.filters import mongo_filter

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(op: str, product_id: Optional[str] = None):
    try:
        yield
    except PyMongoError as e:
        logger.error("products store %s failed id=%s: %s", op, product_id, e)
        raise StoreError(str(e), error=f"Failed to {op} product") from e
    except PydanticValidationError as e:
        # a document written outside this service no longer matches the model
        logger.error("products store %s returned an unreadable document id=%s: %s", op, product_id, e)
        raise StoreError(f"Stored product does not match the product model: {e.error_count()} error(s).",
                         error="Failed to read product") from e


class ProductRepo:
    """
    Product repository backed by the 'products' collection.
    Documents are keyed by the product id (`_id` == `id`); `_id` is never
    returned to callers. No business logic here, only document access.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get(self, product_id: str) -> Optional[Product]:
        with _store_errors("load", product_id):
            doc = await self.col.find_one({"_id": product_id}, {"_id": 0})
            return Product.model_validate(doc) if doc else None

    async def create(self, product: Product) -> None:
        with _store_errors("create", product.id):
            await self.col.insert_one({"_id": product.id, **product.to_document()})

    async def update(self, product_id: str, fields: Dict[str, Any]) -> bool:
        """
        Partial update ($set). Keys absent from `fields` are left untouched.
        Returns False when no document has this id.
        """
        with _store_errors("update", product_id):
            res = await self.col.update_one({"_id": product_id}, {"$set": fields}, upsert=False)
        return res.matched_count > 0

    async def save(self, product: Product) -> bool:
        """Write back every modelled field of a product loaded earlier (last writer wins)."""
        return await self.update(product.id, product.to_document())

    async def query(self, options: QueryOptions) -> List[Product]:
        flt = mongo_filter(options)
        logger.debug("products query filter=%s order_by=%s limit=%s offset=%s",
                     flt, options.order_by, options.limit, options.offset)
        with _store_errors("query"):
            cursor = self.col.find(flt, {"_id": 0})
            if options.order_by:
                cursor = cursor.sort(options.order_by, DESCENDING if options.order_direction == "desc" else ASCENDING)
            if options.offset:
                cursor = cursor.skip(options.offset)
            if options.limit:
                cursor = cursor.limit(options.limit)
            return [Product.model_validate(doc) async for doc in cursor]
