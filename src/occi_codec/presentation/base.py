"""Shared response rendering flow of the OCCI presenters.

Key Responsibilities:
    - Dispatch a result value onto the message, entity or location renderers
    - Convert formatting failures into an error envelope of the same format
    - Apply the fixed ``Server``/``Accept`` headers and correlation identifier
    - Build the discovery document and answer "no content" when it is empty

Collaborators:
    - Upstream: HTTP route handlers
    - Downstream: :class:`~occi_codec.presentation.text_occi.TextOcciPresenter`
      and :class:`~occi_codec.presentation.json_occi.JsonOcciPresenter`
      implement the format specific hooks

Thread Safety:
    - Thread-safe: Presenters hold configuration only
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from collections.abc import Sequence
from http import HTTPStatus
from time import perf_counter
from typing import Any

import structlog
from fastapi.responses import Response

from occi_codec.config.settings import RenderingSettings, get_settings
from occi_codec.models.collaborators import DomainModel
from occi_codec.models.core import Entity, Kind, Mixin
from occi_codec.models.wire import DiscoveryDocument
from occi_codec.observability.metrics import record_render
from occi_codec.utils.errors import FoundationError, OcciCodecError, ResponseParseError
from occi_codec.utils.logging import get_correlation_id

from .conversion import EntityView, to_view
from .discovery import build_discovery, filter_categories
from .interface import accepted_types

logger = structlog.get_logger(__name__)

# Errors raised while serialising a value that was otherwise representable.
FORMATTING_ERRORS = (TypeError, ValueError, UnicodeError)


def status_value(status_code: int | HTTPStatus | None) -> int:
    if status_code is None:
        return int(HTTPStatus.OK)
    return int(status_code)


# ==============================================================================
# PRESENTER BASE
# ==============================================================================


class OcciPresenter:
    """Format independent part of the OCCI response presenters."""

    media_type: str = ""

    def __init__(
        self,
        model: DomainModel,
        settings: RenderingSettings | None = None,
        *,
        correlation_header: str | None = "X-Correlation-ID",
    ) -> None:
        self._model = model
        self._settings = settings or get_settings().rendering
        self._correlation_header = correlation_header

    @property
    def settings(self) -> RenderingSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render(self, result: Any, *, status_code: int | HTTPStatus | None = 200) -> Response:
        """Render ``result`` into a framed response.

        ``result`` is a transport :class:`Response` (pass-through message), a
        message string, an :class:`Entity`, or a list of entities and/or
        location strings.

        Raises:
            ResponseParseError: If ``result`` has none of these shapes, or if
                not even an error envelope can be produced.
        """
        started = perf_counter()
        status = status_value(status_code)
        try:
            shape, response = self._dispatch(result, status)
        except FORMATTING_ERRORS as exc:
            logger.error(
                "occi.render.formatting_failed",
                media_type=self.media_type,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            shape, response = "error", self._failure(exc)
        record_render(self.media_type, shape, response.status_code, perf_counter() - started)
        return response

    def error(self, detail: Any, *, status_code: int | HTTPStatus | None = None) -> Response:
        """Render an error message; codec errors carry their own status."""
        if status_code is None:
            status_code = detail.status if isinstance(detail, OcciCodecError) else HTTPStatus.BAD_REQUEST
        status = status_value(status_code)
        message = str(detail)
        explanation = detail.problem.detail if isinstance(detail, FoundationError) else None
        try:
            response = self._render_error(message, status, explanation)
        except FORMATTING_ERRORS as exc:
            response = self._failure(exc)
        record_render(self.media_type, "error", response.status_code, 0.0)
        return response

    def empty(self, status_code: int | HTTPStatus = HTTPStatus.NO_CONTENT) -> Response:
        """Return a response without body in this presenter's media type."""
        status = status_value(status_code)
        if status == HTTPStatus.NO_CONTENT:
            return self._finalise(Response(status_code=status))
        return self._finalise(Response(content=b"", status_code=status, media_type=self.media_type))

    def interface(
        self,
        kinds: Sequence[Kind],
        mixins: Sequence[Mixin],
        *,
        category_filter: str | None = None,
        user: str | None = None,
    ) -> Response:
        """Render the discovery document, or "no content" when it is empty."""
        started = perf_counter()
        kinds = filter_categories(kinds, category_filter)
        mixins = filter_categories(mixins, category_filter)
        if not kinds and not mixins:
            logger.warning(
                "occi.interface.empty",
                media_type=self.media_type,
                category_filter=category_filter,
            )
            return self.empty(HTTPStatus.NO_CONTENT)
        document = build_discovery(kinds, mixins, self._model, user=user)
        try:
            response = self._render_interface(document)
        except FORMATTING_ERRORS as exc:
            logger.error("occi.interface.formatting_failed", media_type=self.media_type, error=str(exc))
            response = self._failure(exc)
        record_render(self.media_type, "interface", response.status_code, perf_counter() - started)
        return response

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def _dispatch(self, result: Any, status: int) -> tuple[str, Response]:
        if isinstance(result, Response):
            return "passthrough", self._render_passthrough(result, status)
        if isinstance(result, str):
            return "message", self._render_message(result, status)
        if isinstance(result, Entity):
            return "entity", self._render_views([self.view(result)], status)
        if isinstance(result, (list, tuple)):
            locations: list[str] = []
            entities: list[Entity] = []
            for item in result:
                if isinstance(item, str):
                    locations.append(item)
                elif isinstance(item, Entity):
                    entities.append(item)
                else:
                    raise ResponseParseError(
                        f"unknown datatype collection: {type(item).__name__}",
                        detail=f"Cannot represent this value as {self.media_type}",
                    )
            logger.info(
                "occi.render.collection",
                media_type=self.media_type,
                entities=len(entities),
                locations=len(locations),
            )
            if entities:
                return "entities", self._render_views(
                    [self.view(entity) for entity in entities], status
                )
            return "locations", self._render_locations(locations, status)
        raise ResponseParseError(
            f"Cannot represent this value as {self.media_type}: {type(result).__name__}"
        )

    def view(self, entity: Entity) -> EntityView:
        return to_view(self._model, entity)

    def _failure(self, exc: BaseException) -> Response:
        message = f"Error while rendering the response to {self.media_type} representation --> {exc}"
        try:
            return self._render_error(message, int(HTTPStatus.INTERNAL_SERVER_ERROR))
        except FORMATTING_ERRORS as nested:
            raise ResponseParseError(str(nested)) from exc

    def _finalise(self, response: Response) -> Response:
        response.headers["Server"] = self._settings.server_header
        response.headers["Accept"] = accepted_types(self._settings)
        correlation_id = get_correlation_id()
        if self._correlation_header and correlation_id:
            response.headers.setdefault(self._correlation_header, correlation_id)
        return response

    def absolute(self, location: str) -> str:
        return f"{self._settings.server_uri}{location}"

    # ------------------------------------------------------------------
    # Format hooks
    # ------------------------------------------------------------------
    def _render_passthrough(self, response: Response, status: int) -> Response:
        raise NotImplementedError

    def _render_message(self, message: str, status: int) -> Response:
        raise NotImplementedError

    def _render_views(self, views: list[EntityView], status: int) -> Response:
        raise NotImplementedError

    def _render_locations(self, locations: list[str], status: int) -> Response:
        raise NotImplementedError

    def _render_error(self, message: str, status: int, detail: str | None = None) -> Response:
        raise NotImplementedError

    def _render_interface(self, document: DiscoveryDocument) -> Response:
        raise NotImplementedError


def passthrough_body(response: Response) -> str:
    """Return the body of a pass-through response as text."""
    body = getattr(response, "body", b"")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body).decode(response.charset or "utf-8")
    return str(body)


def passthrough_headers(response: Response) -> list[tuple[str, str]]:
    """Headers of a pass-through response that survive re-framing."""
    skipped = {"content-length", "content-type"}
    return [(key, value) for key, value in response.headers.items() if key.lower() not in skipped]


__all__ = [
    "FORMATTING_ERRORS",
    "OcciPresenter",
    "passthrough_body",
    "passthrough_headers",
    "status_value",
]
