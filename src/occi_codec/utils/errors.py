"""Problem detail helpers and the codec error taxonomy.

Key Responsibilities:
    - Provide RFC 7807 compliant data structures used when a decode or render
      failure has to be reported to the transport layer
    - Supply a base exception that carries problem details, and the three
      codec failures raised by parsers and presenters

Collaborators:
    - Upstream: ``TextOcciParser``/``JsonOcciParser`` raise
      :class:`CategoryParseError` and :class:`AttributeParseError`;
      presenters raise :class:`ResponseParseError`
    - Downstream: Presenters serialise the carried :class:`ProblemDetail`
      into the negotiated wire format

Side Effects:
    - None; helpers are pure data containers

Thread Safety:
    - Thread-safe; dataclasses are immutable aside from standard attribute
      mutation semantics
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================

__all__ = [
    "AttributeParseError",
    "CategoryParseError",
    "FoundationError",
    "OcciCodecError",
    "ProblemDetail",
    "ResponseParseError",
]


@dataclass(slots=True)
class ProblemDetail:
    """Problem details (RFC 7807) carried by codec failures.

    ``title`` is the message shown to the client; ``detail`` is an optional
    explanation that presenters add to the error envelope.
    """

    title: str
    status: int
    detail: str | None = None


class FoundationError(RuntimeError):
    """Base exception that carries a :class:`ProblemDetail` instance."""

    def __init__(
        self,
        message: str,
        *,
        status: int = 500,
        detail: str | None = None,
    ) -> None:
        """Initialise the exception with its problem detail.

        Args:
            message: Human readable error summary.
            status: HTTP status code associated with the problem.
            detail: Optional detailed description of the failure.
        """
        super().__init__(message)
        self.problem = ProblemDetail(title=message, status=status, detail=detail)


# ==============================================================================
# CODEC ERRORS
# ==============================================================================


class OcciCodecError(FoundationError):
    """Base class for every failure surfaced by the OCCI codec."""

    default_status = 500

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("status", self.default_status)
        super().__init__(message, **kwargs)

    @property
    def status(self) -> int:
        return self.problem.status


class CategoryParseError(OcciCodecError):
    """Missing or invalid kind, or a payload matching no known shape."""

    default_status = 400


class AttributeParseError(OcciCodecError):
    """Missing link endpoints, attributes on a mixin tag, malformed attributes."""

    default_status = 400


class ResponseParseError(OcciCodecError):
    """A result value that cannot be represented in the requested format."""

    default_status = 500
