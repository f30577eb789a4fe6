"""Transport shapes of the ``application/occi+json`` grammar.

Inbound shapes forbid unknown members so that a payload matches exactly one of
them; the collection shape only inspects its own arrays. Outbound envelopes and
the discovery document reuse the same models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Strict base for single-subject payloads."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class WireEndpoint(WireModel):
    location: str | None = None
    kind: str | None = None


class WireSource(WireEndpoint):
    """Source end of a link."""


class WireTarget(WireEndpoint):
    """Target end of a link."""


class WireLink(WireModel):
    kind: str | None = None
    mixins: list[str] | None = None
    actions: list[str] | None = None
    attributes: dict[str, Any] | None = None
    id: str | None = None
    title: str | None = None
    summary: str | None = None
    location: str | None = None
    source: WireSource | None = None
    target: WireTarget | None = None


class WireResource(WireModel):
    kind: str | None = None
    mixins: list[str] | None = None
    actions: list[str] | None = None
    attributes: dict[str, Any] | None = None
    links: list[WireLink] | None = None
    id: str | None = None
    title: str | None = None
    summary: str | None = None
    location: str | None = None


class WireMixin(WireModel):
    term: str | None = None
    scheme: str | None = None
    title: str | None = None
    location: str | None = None
    attributes: dict[str, Any] | None = None
    actions: list[str] | None = None
    depends: list[str] | None = None
    applies: list[str] | None = None


class WireAction(WireModel):
    action: str | None = None
    attributes: dict[str, Any] | None = None


class WireKind(BaseModel):
    """Kind declaration inside a collection; members are not interpreted."""

    model_config = ConfigDict(extra="allow")

    term: str | None = None
    scheme: str | None = None


class WireCollection(BaseModel):
    """Multi-subject payload; members outside the arrays are ignored."""

    model_config = ConfigDict(extra="ignore")

    resources: list[WireResource] | None = None
    links: list[WireLink] | None = None
    mixins: list[WireMixin] | None = None
    actions: list[WireAction] | None = None
    kinds: list[WireKind] | None = None


# ==============================================================================
# OUTBOUND ENVELOPES
# ==============================================================================


class MessageEnvelope(BaseModel):
    message: str
    status: int
    detail: str | None = None


class LocationsEnvelope(BaseModel):
    locations: list[str] = Field(default_factory=list)


class EntitiesEnvelope(BaseModel):
    resources: list[WireResource] | None = None
    links: list[WireLink] | None = None


# ==============================================================================
# DISCOVERY DOCUMENT
# ==============================================================================


class AttributePattern(BaseModel):
    type: str
    pattern: str = ""


class AttributeSchema(BaseModel):
    mutable: bool
    required: bool
    type: str
    description: str | None = None
    default: Any = None
    pattern: AttributePattern | None = None


class ActionInterface(BaseModel):
    scheme: str
    term: str
    title: str | None = None
    attributes: dict[str, AttributeSchema] = Field(default_factory=dict)


class KindInterface(BaseModel):
    scheme: str
    term: str
    title: str | None = None
    location: str | None = None
    attributes: dict[str, AttributeSchema] = Field(default_factory=dict)
    actions: list[str] = Field(default_factory=list)
    parent: str | None = None


class MixinInterface(BaseModel):
    scheme: str
    term: str
    title: str | None = None
    location: str | None = None
    attributes: dict[str, AttributeSchema] = Field(default_factory=dict)
    actions: list[str] = Field(default_factory=list)
    rel: list[str] | None = None


class ModelInterface(BaseModel):
    id: str
    kinds: list[KindInterface] = Field(default_factory=list)
    mixins: list[MixinInterface] = Field(default_factory=list)
    actions: list[ActionInterface] = Field(default_factory=list)


class DiscoveryDocument(BaseModel):
    model: list[ModelInterface] = Field(default_factory=list)


__all__ = [
    "ActionInterface",
    "AttributePattern",
    "AttributeSchema",
    "DiscoveryDocument",
    "EntitiesEnvelope",
    "KindInterface",
    "LocationsEnvelope",
    "MessageEnvelope",
    "MixinInterface",
    "ModelInterface",
    "WireAction",
    "WireCollection",
    "WireEndpoint",
    "WireKind",
    "WireLink",
    "WireMixin",
    "WireModel",
    "WireResource",
    "WireSource",
    "WireTarget",
]
