"""Utility modules for the codec foundation layer."""

from .errors import (
    AttributeParseError,
    CategoryParseError,
    FoundationError,
    OcciCodecError,
    ProblemDetail,
    ResponseParseError,
)


__all__ = [
    "AttributeParseError",
    "CategoryParseError",
    "FoundationError",
    "OcciCodecError",
    "ProblemDetail",
    "ResponseParseError",
]
