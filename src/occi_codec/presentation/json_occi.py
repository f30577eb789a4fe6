"""application/occi+json codec.

This module decodes structured OCCI request bodies and renders responses,
entity collections and the discovery document as JSON documents.

Key Responsibilities:
    - Detect the shape of a request body (collection, resource, link, mixin
      tag, action invocation) without an outer type discriminator
    - Convert each decoded shape into :class:`InputData` values
    - Render messages, locations and entities into their JSON envelopes

Collaborators:
    - Upstream: HTTP route handlers and :mod:`occi_codec.presentation.negotiation`
    - Downstream: :mod:`occi_codec.models.wire` pydantic shapes

Side Effects:
    - Emits decode and render metrics

Thread Safety:
    - Thread-safe: Parser and presenter hold no per-request state

Example:
    >>> parser = JsonOcciParser()
    >>> [data] = parser.parse_body('{"kind": "http://schemas.ogf.org/occi/infrastructure#compute"}')
    >>> data.kind
    'http://schemas.ogf.org/occi/infrastructure#compute'
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union

import structlog
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError

from occi_codec.config.settings import RenderingSettings
from occi_codec.models.collaborators import DomainModel
from occi_codec.models.request import (
    OCCI_CORE_ID,
    OCCI_CORE_SOURCE,
    OCCI_CORE_SUMMARY,
    OCCI_CORE_TARGET,
    OCCI_CORE_TITLE,
    URN_UUID_PREFIX,
    InputData,
    category_id,
    with_urn,
)
from occi_codec.models.wire import (
    DiscoveryDocument,
    EntitiesEnvelope,
    LocationsEnvelope,
    MessageEnvelope,
    WireAction,
    WireCollection,
    WireLink,
    WireMixin,
    WireResource,
    WireSource,
    WireTarget,
)
from occi_codec.observability.metrics import record_decode, record_decode_failure
from occi_codec.utils.errors import AttributeParseError, CategoryParseError, OcciCodecError

from .base import OcciPresenter, passthrough_body, passthrough_headers
from .conversion import EndpointView, EntityView
from .interface import MEDIA_TYPE_JSON_OCCI, HeaderSource

# ==============================================================================
# CONSTANTS
# ==============================================================================

logger = structlog.get_logger(__name__)

EMPTY_JSON = "{ }"
OK_MESSAGE = "ok"
UNKNOWN_INPUT = "Unknown json input, please check your payload."

COLLECTION_MEMBERS = ("resources", "links", "mixins", "actions")
# Members no single-subject shape declares; their presence alone marks a collection.
COLLECTION_ONLY_MEMBERS = ("resources", "kinds")


def dumps(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def describe_validation_error(exc: ValidationError) -> str:
    """Return a one-line summary of a pydantic validation failure."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    return f"{exc.title}: " + "; ".join(problems)


# ==============================================================================
# DECODE ATTEMPTS
# ==============================================================================


@dataclass(slots=True)
class Decoded:
    """A shape matched; ``requests`` may be empty for a kinds-only collection."""

    shape: str
    requests: list[InputData] = field(default_factory=list)


@dataclass(slots=True)
class Mismatch:
    """The payload is structurally not of the attempted shape."""

    shape: str
    reason: str


DecodeResult = Union[Decoded, Mismatch]


def _validate(model: type[BaseModel], payload: dict[str, Any], shape: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        return Mismatch(shape=shape, reason=describe_validation_error(exc))


def _entity_attributes(
    data: InputData,
    *,
    attributes: dict[str, Any] | None,
    entity_id: str | None,
    title: str | None,
    summary: str | None,
) -> dict[str, Any]:
    values = dict(attributes or {})
    if entity_id is not None:
        values[OCCI_CORE_ID] = with_urn(entity_id)
        data.entity_id = entity_id.replace(URN_UUID_PREFIX, "")
    if title:
        values[OCCI_CORE_TITLE] = title
    if summary:
        values[OCCI_CORE_SUMMARY] = summary
    return values


def decode_link(link: WireLink) -> InputData:
    """Convert a wire link into an :class:`InputData`.

    Raises:
        AttributeParseError: If the source or target location is missing.
        CategoryParseError: If the link declares no kind.
    """
    data = InputData()
    values = _entity_attributes(
        data,
        attributes=link.attributes,
        entity_id=link.id,
        title=link.title,
        summary=link.summary,
    )
    if link.source is None or not link.source.location:
        raise AttributeParseError(f"No source location set for link: {data.entity_id}")
    if link.target is None or not link.target.location:
        raise AttributeParseError(f"No target location set for link: {data.entity_id}")
    values[OCCI_CORE_SOURCE] = link.source.location
    values[OCCI_CORE_TARGET] = link.target.location
    if not link.kind:
        raise CategoryParseError(f"Kind is not defined for link: {data.entity_id}")
    data.attributes = values
    data.kind = link.kind
    data.location = link.location
    data.mixins.update(link.mixins or ())
    return data


def decode_resource(resource: WireResource) -> list[InputData]:
    """Convert a wire resource into its request followed by one per nested link.

    Only the first declared action is kept.

    Raises:
        CategoryParseError: If the resource declares no kind.
    """
    data = InputData()
    data.attributes = _entity_attributes(
        data,
        attributes=resource.attributes,
        entity_id=resource.id,
        title=resource.title,
        summary=resource.summary,
    )
    if not resource.kind:
        raise CategoryParseError(f"Kind is not defined for resource: {data.entity_id}")
    data.kind = resource.kind
    data.location = resource.location
    data.mixins.update(resource.mixins or ())
    if resource.actions:
        if len(resource.actions) > 1:
            logger.warning(
                "occi.json.actions_ignored",
                kept=resource.actions[0],
                ignored=resource.actions[1:],
            )
        data.action = resource.actions[0]
    return [data, *(decode_link(link) for link in resource.links or ())]


def decode_mixin_tag(mixin: WireMixin) -> InputData:
    """Convert a wire mixin into a mixin tag declaration.

    Raises:
        AttributeParseError: If the mixin declares attributes.
        CategoryParseError: If location, term or scheme is missing.
    """
    if mixin.attributes:
        raise AttributeParseError("The attributes on mixin tag must be empty.")
    if not (mixin.location or "").strip():
        raise CategoryParseError("The location on mixin tag must be set, like /mytag/my_stuff/")
    if not (mixin.term or "").strip():
        raise CategoryParseError("A term must be set for a mixin tag.")
    if not (mixin.scheme or "").strip():
        raise CategoryParseError("A scheme must be set for a mixin tag.")
    return InputData(
        mixin_tag=category_id(mixin.scheme, mixin.term),
        mixin_tag_title=mixin.title,
        location=mixin.location,
    )


def decode_action(action: WireAction) -> InputData:
    return InputData(action=action.action, attributes=dict(action.attributes or {}))


def attempt_collection(payload: dict[str, Any]) -> DecodeResult:
    parsed = _validate(WireCollection, payload, "collection")
    if isinstance(parsed, Mismatch):
        return parsed
    declared = [name for name in COLLECTION_MEMBERS if getattr(parsed, name)]
    if not declared:
        if any(name in payload for name in COLLECTION_ONLY_MEMBERS):
            logger.info("occi.json.empty_collection", kinds=len(parsed.kinds or ()))
            return Decoded(shape="collection")
        return Mismatch(shape="collection", reason="no resources, links, mixins or actions declared")
    if declared == ["links"] and "kind" in payload:
        return Mismatch(shape="collection", reason="links belong to the top-level kind")

    requests: list[InputData] = []
    nested: list[InputData] = []
    for resource in parsed.resources or ():
        resource_data, *link_data = decode_resource(resource)
        requests.append(resource_data)
        nested.extend(link_data)
    # Links owned by a resource follow every resource so that their endpoints exist.
    requests.extend(nested)
    requests.extend(decode_link(link) for link in parsed.links or ())
    requests.extend(decode_mixin_tag(mixin) for mixin in parsed.mixins or ())
    requests.extend(decode_action(action) for action in parsed.actions or ())
    return Decoded(shape="collection", requests=requests)


def attempt_resource(payload: dict[str, Any]) -> DecodeResult:
    parsed = _validate(WireResource, payload, "resource")
    if isinstance(parsed, Mismatch):
        return parsed
    return Decoded(shape="resource", requests=decode_resource(parsed))


def attempt_link(payload: dict[str, Any]) -> DecodeResult:
    parsed = _validate(WireLink, payload, "link")
    if isinstance(parsed, Mismatch):
        return parsed
    return Decoded(shape="link", requests=[decode_link(parsed)])


def attempt_mixin_tag(payload: dict[str, Any]) -> DecodeResult:
    parsed = _validate(WireMixin, payload, "mixin_tag")
    if isinstance(parsed, Mismatch):
        return parsed
    return Decoded(shape="mixin_tag", requests=[decode_mixin_tag(parsed)])


def attempt_action(payload: dict[str, Any]) -> DecodeResult:
    parsed = _validate(WireAction, payload, "action")
    if isinstance(parsed, Mismatch):
        return parsed
    return Decoded(shape="action", requests=[decode_action(parsed)])


DECODE_ATTEMPTS: tuple[Callable[[dict[str, Any]], DecodeResult], ...] = (
    attempt_collection,
    attempt_resource,
    attempt_link,
    attempt_mixin_tag,
    attempt_action,
)


# ==============================================================================
# PARSER
# ==============================================================================


class JsonOcciParser:
    """Decode application/occi+json request bodies."""

    media_type = MEDIA_TYPE_JSON_OCCI

    def __init__(self, media_type: str | None = None) -> None:
        if media_type:
            self.media_type = media_type

    def parse(self, headers: HeaderSource | None, body: bytes | str | None = None) -> list[InputData]:
        """Decode ``body``; OCCI headers carry nothing in this format."""
        return self.parse_body(body)

    def parse_body(self, body: bytes | str | None) -> list[InputData]:
        """Decode a request body into one or more requests.

        An empty body, or an empty object, yields a single empty request.

        Raises:
            CategoryParseError: If the body is not JSON, matches no known
                shape, or declares an entity without kind.
            AttributeParseError: If a link misses an endpoint or a mixin tag
                carries attributes.
        """
        try:
            requests, shape = self._decode(body)
        except OcciCodecError as exc:
            record_decode_failure(self.media_type, exc)
            logger.warning(
                "occi.json.decode_failed",
                media_type=self.media_type,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        record_decode(self.media_type, shape, len(requests))
        logger.info("occi.json.decoded", shape=shape, requests=len(requests))
        return requests

    def _decode(self, body: bytes | str | None) -> tuple[list[InputData], str]:
        if isinstance(body, (bytes, bytearray)):
            try:
                body = bytes(body).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise CategoryParseError(f"The server cannot read the json input --> {exc}") from exc
        if body is None or not body.strip():
            return [InputData()], "empty"
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise CategoryParseError(f"The server cannot read the json input --> {exc}") from exc
        if not isinstance(payload, dict):
            raise CategoryParseError(
                f"{UNKNOWN_INPUT} Expected a JSON object, got {type(payload).__name__}."
            )
        if not payload:
            return [InputData()], "empty"

        reasons: list[str] = []
        for attempt in DECODE_ATTEMPTS:
            result = attempt(payload)
            if isinstance(result, Decoded):
                return result.requests, result.shape
            logger.debug("occi.json.shape_mismatch", shape=result.shape, reason=result.reason)
            reasons.append(f"[{result.shape}] {result.reason}")
        raise CategoryParseError(f"{UNKNOWN_INPUT} " + " ".join(reasons))


# ==============================================================================
# PRESENTER
# ==============================================================================


def leading_slash(location: str) -> str:
    return location if location.startswith("/") else "/" + location


def _endpoint(endpoint: EndpointView | None, model: type[WireSource] | type[WireTarget]) -> Any:
    if endpoint is None:
        return None
    return model(location=leading_slash(endpoint.location), kind=endpoint.kind)


def wire_link(view: EntityView) -> WireLink:
    return WireLink(
        kind=view.kind.identifier,
        mixins=[mixin.identifier for mixin in view.mixins],
        actions=[action.identifier for action in view.actions],
        attributes=dict(view.attributes),
        id=with_urn(view.id),
        title=view.title,
        summary=view.summary,
        location=view.location,
        source=_endpoint(view.source, WireSource),
        target=_endpoint(view.target, WireTarget),
    )


def wire_resource(view: EntityView) -> WireResource:
    return WireResource(
        kind=view.kind.identifier,
        mixins=[mixin.identifier for mixin in view.mixins],
        actions=[action.identifier for action in view.actions],
        attributes=dict(view.attributes),
        links=[wire_link(link) for link in view.links],
        id=with_urn(view.id),
        title=view.title,
        summary=view.summary,
        location=view.location,
    )


class JsonOcciPresenter(OcciPresenter):
    """Presenter producing application/occi+json documents."""

    media_type = MEDIA_TYPE_JSON_OCCI

    def __init__(
        self,
        model: DomainModel,
        settings: RenderingSettings | None = None,
        *,
        media_type: str | None = None,
        correlation_header: str | None = "X-Correlation-ID",
    ) -> None:
        super().__init__(model, settings, correlation_header=correlation_header)
        if media_type:
            self.media_type = media_type

    def _document(self, content: str, status: int) -> Response:
        return self._finalise(Response(content=content, status_code=status, media_type=self.media_type))

    def _dump(self, model: BaseModel) -> str:
        return dumps(model.model_dump(exclude_none=True))

    def _render_passthrough(self, response: Response, status: int) -> Response:
        message = OK_MESSAGE if status == 200 else passthrough_body(response)
        rendered = self._document(self._dump(MessageEnvelope(message=message, status=status)), status)
        for key, value in passthrough_headers(response):
            rendered.headers.append(key, value)
        return rendered

    def _render_message(self, message: str, status: int) -> Response:
        if message == EMPTY_JSON:
            return self._document(message, status)
        if status == 200:
            message = OK_MESSAGE
        return self._document(self._dump(MessageEnvelope(message=message, status=status)), status)

    def _render_error(self, message: str, status: int, detail: str | None = None) -> Response:
        envelope = MessageEnvelope(message=message, status=status, detail=detail)
        return self._document(self._dump(envelope), status)

    def _render_locations(self, locations: list[str], status: int) -> Response:
        return self._document(self._dump(LocationsEnvelope(locations=list(locations))), status)

    def _render_views(self, views: list[EntityView], status: int) -> Response:
        resources = [wire_resource(view) for view in views if not view.is_link]
        links = [wire_link(view) for view in views if view.is_link]
        if len(views) == 1:
            # A single entity is rendered bare, without collection envelope.
            (single,) = resources or links
            return self._document(self._dump(single), status)
        envelope = EntitiesEnvelope(resources=resources or None, links=links or None)
        return self._document(self._dump(envelope), status)

    def _render_interface(self, document: DiscoveryDocument) -> Response:
        return self._document(self._dump(document), 200)


__all__ = [
    "DECODE_ATTEMPTS",
    "EMPTY_JSON",
    "Decoded",
    "JsonOcciParser",
    "JsonOcciPresenter",
    "Mismatch",
    "decode_action",
    "decode_link",
    "decode_mixin_tag",
    "decode_resource",
    "describe_validation_error",
    "wire_link",
    "wire_resource",
]
