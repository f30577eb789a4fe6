"""Normalized request representation shared by both OCCI parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

URN_UUID_PREFIX = "urn:uuid:"

OCCI_CORE_ID = "occi.core.id"
OCCI_CORE_TITLE = "occi.core.title"
OCCI_CORE_SUMMARY = "occi.core.summary"
OCCI_CORE_SOURCE = "occi.core.source"
OCCI_CORE_TARGET = "occi.core.target"

RESERVED_ATTRIBUTES = frozenset(
    {OCCI_CORE_ID, OCCI_CORE_TITLE, OCCI_CORE_SUMMARY, OCCI_CORE_SOURCE, OCCI_CORE_TARGET}
)


def category_id(scheme: str | None, term: str | None) -> str:
    """Return the canonical identifier of a category: ``scheme + term``."""
    return f"{scheme or ''}{term or ''}"


def strip_urn(identifier: str) -> str:
    """Remove the ``urn:uuid:`` prefix when present."""
    if identifier.startswith(URN_UUID_PREFIX):
        return identifier[len(URN_UUID_PREFIX) :]
    return identifier


def with_urn(identifier: str) -> str:
    """Prefix ``identifier`` with ``urn:uuid:`` unless it already is."""
    if identifier.startswith(URN_UUID_PREFIX):
        return identifier
    return URN_UUID_PREFIX + identifier


@dataclass(slots=True)
class InputData:
    """One decoded unit of work.

    Attributes:
        kind: Kind identifier of the resource or link being addressed.
        mixins: Mixin identifiers applied to the entity.
        mixin_tag: Identifier of a user defined mixin tag.
        mixin_tag_title: Title given to ``mixin_tag``.
        action: Identifier of an action to invoke.
        attributes: Raw attribute values keyed by attribute name.
        entity_id: Entity identifier without the ``urn:uuid:`` prefix.
        location: Path the request declares for its subject.
        extra_locations: Paths declared with ``X-OCCI-Location``.
    """

    kind: str | None = None
    mixins: set[str] = field(default_factory=set)
    mixin_tag: str | None = None
    mixin_tag_title: str | None = None
    action: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    entity_id: str | None = None
    location: str | None = None
    extra_locations: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` for a path-only request carrying no declaration."""
        return not (
            self.kind
            or self.mixins
            or self.mixin_tag
            or self.action
            or self.attributes
            or self.entity_id
            or self.location
            or self.extra_locations
        )


# Name used throughout the documentation for the decoded unit of work.
NormalizedRequest = InputData


__all__ = [
    "InputData",
    "NormalizedRequest",
    "OCCI_CORE_ID",
    "OCCI_CORE_SOURCE",
    "OCCI_CORE_SUMMARY",
    "OCCI_CORE_TARGET",
    "OCCI_CORE_TITLE",
    "RESERVED_ATTRIBUTES",
    "URN_UUID_PREFIX",
    "category_id",
    "strip_urn",
    "with_urn",
]
