from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional

Operator = Literal["==", "!=", "<", "<=", ">", ">=", "in", "not-in", "array-contains", "array-contains-any"]


class QueryFilter(BaseModel):
    field: str = Field(min_length=1)
    operator: Operator = "=="
    value: Any = None

    model_config = {"frozen": True}


class QueryOptions(BaseModel):
    filters: List[QueryFilter] = []
    order_by: Optional[str] = Field(default=None, alias="orderBy")
    order_direction: Literal["asc", "desc"] = Field(default="asc", alias="orderDirection")
    limit: Optional[int] = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)

    model_config = {"frozen": True, "populate_by_name": True}
