"""Wire formats of the OCCI codec: parsers, presenters and negotiation."""

from .base import OcciPresenter
from .interface import (
    MEDIA_TYPE_JSON,
    MEDIA_TYPE_JSON_OCCI,
    MEDIA_TYPE_TEXT_OCCI,
    MEDIA_TYPE_TEXT_PLAIN,
    RequestParser,
    ResponsePresenter,
)
from .json_occi import JsonOcciParser, JsonOcciPresenter
from .negotiation import accepted_types, codec_for, parser_for, select_media_type
from .query import OcciQueryParams
from .text_occi import TextOcciParser, TextOcciPresenter

__all__ = [
    "MEDIA_TYPE_JSON",
    "MEDIA_TYPE_JSON_OCCI",
    "MEDIA_TYPE_TEXT_OCCI",
    "MEDIA_TYPE_TEXT_PLAIN",
    "JsonOcciParser",
    "JsonOcciPresenter",
    "OcciPresenter",
    "OcciQueryParams",
    "RequestParser",
    "ResponsePresenter",
    "TextOcciParser",
    "TextOcciPresenter",
    "accepted_types",
    "codec_for",
    "parser_for",
    "select_media_type",
]
