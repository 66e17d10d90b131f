"""Shared Pydantic base for models that mirror Langfuse JSON."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LangfuseModel(CamelModel):
    """Base for upstream records.

    Unknown upstream fields are kept so the proxy can echo them back
    unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class PageMeta(LangfuseModel):
    """Pagination block returned by list endpoints."""

    page: int = 1
    limit: int = 0
    total_items: int = 0
    total_pages: int = 0


class PaginatedResponse(LangfuseModel, Generic[T]):
    """``{data: [...], meta: {...}}`` envelope of Langfuse list endpoints."""

    data: list[T] = Field(default_factory=list)
    meta: PageMeta = Field(default_factory=PageMeta)
