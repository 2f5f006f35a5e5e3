from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
import json


class Variation(BaseModel):
    id: str = ""
    sku: str = ""
    barcode: Optional[str] = None
    price: float = 0
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    stock: int = 0
    attributes: Dict[str, str] = {}
    active: bool = False

    # NaN/Infinity are not JSON and break every later read
    model_config = {"frozen": True, "populate_by_name": True, "allow_inf_nan": False}  # immuable = safe


class Product(BaseModel):
    """
    A product is either simple (no variations; its own sku/price/stock are
    authoritative) or variant-bearing (variations carry pricing and stock, and
    `filter_price` is the minimum variation price).
    """
    id: str = ""
    name: str = ""
    description: str = ""
    brand: Optional[str] = None
    category: str = ""
    currency: str = ""
    active: bool = False
    project_id: str = ""
    subdomain: str = ""
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    filter_price: float = 0

    # simple product
    sku: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    barcode: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    variations: List[Variation] = []

    weight: Optional[float] = None
    dimensions: Optional[Dict[str, float]] = None
    metadata: Optional[Dict[str, Any]] = None

    # NaN/Infinity are not JSON and break every later read
    model_config = {"frozen": True, "populate_by_name": True, "allow_inf_nan": False}  # immuable = safe

    @field_validator("metadata")
    @classmethod
    def _metadata_is_json(cls, v):
        if v is not None:
            try:
                json.dumps(v, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise ValueError(f"metadata must be plain JSON: {e}") from e
        return v

    @classmethod
    def wire_names(cls) -> frozenset:
        return frozenset(f.alias or name for name, f in cls.model_fields.items())

    @property
    def is_simple(self) -> bool:
        return not self.variations

    def to_document(self) -> dict:
        """Mongo representation: wire names, datetimes kept native."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
