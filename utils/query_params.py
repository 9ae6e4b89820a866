# utils/query_params.py

from typing import Generic, Type, TypeVar, Optional
from sqlalchemy import asc, desc
from sqlalchemy.orm import Query as SAQuery
from pydantic import BaseModel, ConfigDict, Field

ModelT = TypeVar("ModelT")


class QueryParams(BaseModel, Generic[ModelT]):
    limit: Optional[int] = Field(None, ge=1, le=200)
    offset: Optional[int] = Field(None, ge=0)
    sort_by: str = "created_at"
    sort_order: str = Field("desc", pattern="^(asc|desc)$")

    model_config = ConfigDict(extra="ignore")

    def apply(self, query: SAQuery, model: Type[ModelT]) -> SAQuery:
        # Ordering
        col = getattr(model, self.sort_by, None)
        if col is None:
            raise ValueError(f"Invalid sort_by column: {self.sort_by!r}")
        query = query.order_by(asc(col) if self.sort_order == "asc" else desc(col))

        # Pagination only if provided
        if self.offset is not None:
            query = query.offset(self.offset)
        if self.limit is not None:
            query = query.limit(self.limit)

        return query
