"""Response envelope returned by the engine and every adapter.

The envelope fields (``status``, ``message``, ``data``, ``errors``) and the
three ``data.type`` tags (``single``, ``multiple``, ``paginated``) form the
stable wire contract. Python attributes are snake_case; :meth:`Response.to_dict`
renders the camelCase wire form.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FieldError(_WireModel):
    """A single field-level validation error."""

    field: str
    message: str


class SingleData(_WireModel):
    type: Literal["single"] = "single"
    item: Any = None


class MultipleData(_WireModel):
    type: Literal["multiple"] = "multiple"
    items: list[Any] = Field(default_factory=list)


class PaginatedData(_WireModel):
    """One page of a list result plus the page arithmetic around it."""

    type: Literal["paginated"] = "paginated"
    items: list[Any] = Field(default_factory=list)
    total_items: int
    current_page: int
    next_page: int | None = None
    prev_page: int | None = None
    total_pages: int
    limit: int
    has_more: bool = False

    @classmethod
    def from_window(
        cls,
        items: list[Any],
        *,
        total_items: int,
        skip: int,
        limit: int,
    ) -> PaginatedData:
        """Build page metadata for the ``[skip, skip + limit)`` window.

        ``limit`` must be positive; the engine normalizes it before dispatch.
        """
        page_index = skip // limit
        next_page = page_index + 2 if skip + limit < total_items else None
        return cls(
            items=items,
            total_items=total_items,
            current_page=page_index + 1,
            next_page=next_page,
            prev_page=page_index if skip - limit >= 0 else None,
            total_pages=math.ceil(total_items / limit),
            limit=limit,
            has_more=next_page is not None,
        )


ResponseData = Annotated[
    Union[SingleData, MultipleData, PaginatedData],
    Field(discriminator="type"),
]


class Response(_WireModel):
    """Uniform success/failure envelope.

    Invariants: a failed response carries no ``data``; ``errors`` is only set
    for payload validation failures.
    """

    status: bool
    message: str
    data: ResponseData | None = None
    errors: list[FieldError] | None = None

    @model_validator(mode="after")
    def _failure_has_no_data(self) -> Response:
        if not self.status and self.data is not None:
            raise ValueError("a failed response must not carry data")
        return self

    # ── Factory methods ──────────────────────────────────────────

    @classmethod
    def single(cls, message: str, item: Any) -> Response:
        return cls(status=True, message=message, data=SingleData(item=item))

    @classmethod
    def multiple(cls, message: str, items: list[Any]) -> Response:
        return cls(status=True, message=message, data=MultipleData(items=items))

    @classmethod
    def paginated(
        cls,
        message: str,
        items: list[Any],
        *,
        total_items: int,
        skip: int,
        limit: int,
    ) -> Response:
        data = PaginatedData.from_window(
            items, total_items=total_items, skip=skip, limit=limit
        )
        return cls(status=True, message=message, data=data)

    @classmethod
    def empty(cls, message: str) -> Response:
        """Successful response without a payload (e.g. delete)."""
        return cls(status=True, message=message)

    @classmethod
    def failure(
        cls, message: str, errors: list[FieldError] | None = None
    ) -> Response:
        return cls(status=False, message=message, errors=errors)

    # ── Serialisation ────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Render the wire form; ``errors`` is omitted when absent."""
        exclude = {"errors"} if self.errors is None else None
        return self.model_dump(by_alias=True, exclude=exclude)
