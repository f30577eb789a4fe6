from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import pytest
from starlette.requests import Request

from occi_codec.presentation.query import OcciQueryParams
from occi_codec.utils.errors import AttributeParseError


def _fake_request(query: dict[str, Any]) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/compute/",
        "query_string": urlencode(query, doseq=True).encode(),
        "headers": [],
    }
    return Request(scope)


def test_query_params_defaults() -> None:
    params = OcciQueryParams.from_request(_fake_request({}))
    assert params == OcciQueryParams()
    assert params.page == 1
    assert params.number == 10
    assert params.offset == 0


def test_query_params_parsing() -> None:
    params = OcciQueryParams.from_request(
        _fake_request(
            {
                "action": "start",
                "category": "compute",
                "attribute": "occi.compute.state",
                "value": "active",
                "page": "3",
                "number": "20",
            }
        )
    )
    assert params.action == "start"
    assert params.category == "compute"
    assert params.attribute == "occi.compute.state"
    assert params.value == "active"
    assert params.offset == 40


@pytest.mark.parametrize("query", [{"page": "zero"}, {"number": "0"}, {"page": "-1"}])
def test_invalid_pagination_is_rejected(query) -> None:
    with pytest.raises(AttributeParseError):
        OcciQueryParams.from_request(_fake_request(query))
