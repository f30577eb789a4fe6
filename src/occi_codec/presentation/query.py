"""Utilities for parsing OCCI query string parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Request

from occi_codec.utils.errors import AttributeParseError

DEFAULT_PAGE = 1
DEFAULT_NUMBER = 10


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise AttributeParseError(f"Query parameter '{name}' must be an integer, got '{raw}'") from exc
    if value < 1:
        raise AttributeParseError(f"Query parameter '{name}' must be at least 1, got {value}")
    return value


@dataclass(slots=True)
class OcciQueryParams:
    """Filtering, pagination and action parameters of an OCCI request.

    ``category`` restricts collections and the discovery document to one
    category (term or identifier); ``attribute``/``value`` filter entities on
    an attribute value; ``page`` and ``number`` paginate collections.
    """

    action: str | None = None
    category: str | None = None
    attribute: str | None = None
    value: str | None = None
    page: int = DEFAULT_PAGE
    number: int = DEFAULT_NUMBER

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.number

    @classmethod
    def from_request(cls, request: Request) -> OcciQueryParams:
        params: dict[str, Any] = {}
        qp = request.query_params
        for name in ("action", "category", "attribute", "value"):
            if qp.get(name):
                params[name] = qp[name].strip()
        if "page" in qp:
            params["page"] = _positive_int("page", qp["page"])
        if "number" in qp:
            params["number"] = _positive_int("number", qp["number"])
        return cls(**params)


__all__ = ["DEFAULT_NUMBER", "DEFAULT_PAGE", "OcciQueryParams"]
