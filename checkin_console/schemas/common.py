"""
Common Pydantic schemas
"""

import json
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

T = TypeVar("T")


class WireModel(BaseModel):
    """Base for records decoded from the backend.

    The backend has shipped both PascalCase and camelCase field names over
    time. Each field lists every accepted spelling through ``AliasChoices``
    so the rest of the console only sees one attribute name.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StandardResponse(BaseModel):
    """Standard console API response"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Error response schema"""
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None

class Pagination(WireModel):
    """Pagination metadata returned with list responses"""
    page: Optional[int] = Field(default=None, validation_alias=AliasChoices("Page", "page"))
    limit: Optional[int] = Field(default=None, validation_alias=AliasChoices("Limit", "limit"))
    total_pages: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("TotalPage", "TotalPages", "totalPages", "totalPage"),
    )
    total_rows: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("TotalRows", "totalRows", "Total", "total"),
    )

class ListQueryParams(BaseModel):
    """Query parameters accepted by list endpoints"""

    model_config = ConfigDict(frozen=True)

    page: Optional[int] = None
    limit: Optional[int] = None
    sort: Optional[str] = None
    dir: Optional[str] = None
    query: Optional[Union[str, Dict[str, Any]]] = None

    def to_query(self) -> Dict[str, Any]:
        """Build the query-string mapping, leaving out unset parameters"""
        params: Dict[str, Any] = {}
        for key in ("page", "limit", "sort", "dir"):
            value = getattr(self, key)
            if value is not None:
                params[key] = value
        if self.query:
            params["query"] = self.query if isinstance(self.query, str) else json.dumps(
                self.query, separators=(",", ":"), sort_keys=True
            )
        return params

    def cache_key(self) -> tuple:
        """Hashable form used in query-cache keys"""
        return tuple(sorted(self.to_query().items()))

class ListResponse(BaseModel, Generic[T]):
    """Decoded list response"""
    items: List[T]
    pagination: Optional[Pagination] = None

    @property
    def has_next_page(self) -> bool:
        if not self.pagination or not self.pagination.page or not self.pagination.total_pages:
            return False
        return self.pagination.page < self.pagination.total_pages
