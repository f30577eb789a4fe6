"""text/occi codec: the header-only OCCI rendering.

Requests and responses carry their OCCI payload in ``Category``,
``X-OCCI-Attribute`` and ``X-OCCI-Location`` headers; the body only holds a
short acknowledgement. A request addresses exactly one subject.

Example:
    >>> parser = TextOcciParser()
    >>> data = parser.parse_headers({
    ...     "Category": 'compute; scheme="http://schemas.ogf.org/occi/infrastructure#"; class="kind"',
    ...     "X-OCCI-Attribute": 'occi.core.title="vm1", occi.compute.cores="2"',
    ... })
    >>> data.kind, data.attributes["occi.core.title"]
    ('http://schemas.ogf.org/occi/infrastructure#compute', 'vm1')
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

import structlog
from fastapi.responses import Response

from occi_codec.models.request import (
    OCCI_CORE_ID,
    OCCI_CORE_SOURCE,
    OCCI_CORE_SUMMARY,
    OCCI_CORE_TARGET,
    OCCI_CORE_TITLE,
    InputData,
    category_id,
    strip_urn,
    with_urn,
)
from occi_codec.models.wire import DiscoveryDocument
from occi_codec.observability.metrics import record_decode

from .base import OcciPresenter, passthrough_body, passthrough_headers
from .conversion import CategoryRef, EntityView
from .discovery import flatten_discovery
from .interface import (
    HEADER_ATTRIBUTE,
    HEADER_CATEGORY,
    HEADER_LINK,
    HEADER_LOCATION,
    MEDIA_TYPE_TEXT_OCCI,
    HeaderSource,
    header_values,
    split_outside_quotes,
)

# ==============================================================================
# CONSTANTS
# ==============================================================================

logger = structlog.get_logger(__name__)

OK_BODY = "ok"

CLASS_KIND = "kind"
CLASS_MIXIN = "mixin"
CLASS_ACTION = "action"

CATEGORY_PATTERN = re.compile(
    r'^\s*(?P<term>[^\s;"]+)\s*'
    r';\s*scheme\s*=\s*"(?P<scheme>[^"]*)"\s*'
    r';\s*class\s*=\s*"?(?P<cls>[A-Za-z]+)"?\s*'
    r"(?P<params>;.*)?$"
)
CATEGORY_PARAM_PATTERN = re.compile(r';\s*(?P<name>[\w-]+)\s*=\s*"(?P<value>[^"]*)"')
ESCAPE_PATTERN = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)

# Characters kept verbatim when a location is percent-encoded for a header.
LOCATION_SAFE = "/:?#[]@!$&'()*+,;=%~"


def escape_header_text(text: str) -> str:
    """Escape a quoted header value so that it is plain ASCII.

    Backslashes and quotes are backslash-escaped; every other non-ASCII
    character becomes a ``\\uXXXX`` escape (UTF-16 code units).
    """
    escaped: list[str] = []
    for char in text.replace("\\", "\\\\").replace('"', '\\"'):
        if char.isascii():
            escaped.append(char)
            continue
        units = char.encode("utf-16-be")
        escaped.extend(
            f"\\u{int.from_bytes(units[i : i + 2], 'big'):04x}" for i in range(0, len(units), 2)
        )
    return "".join(escaped)


def unescape_header_text(text: str) -> str:
    """Reverse :func:`escape_header_text`."""

    def replace(match: re.Match[str]) -> str:
        escaped = match.group(1)
        if len(escaped) == 5:
            return chr(int(escaped[1:], 16))
        return escaped

    # Astral characters arrive as two escaped surrogates and are joined here.
    joined = ESCAPE_PATTERN.sub(replace, text).encode("utf-16", "surrogatepass")
    return joined.decode("utf-16", "surrogatepass")


def header_location(location: str) -> str:
    """Percent-encode a location that cannot travel in a header as is."""
    if location.isascii():
        return location
    return quote(location, safe=LOCATION_SAFE)


def fits_header(value: str) -> bool:
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


def _unquote(value: str) -> str:
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return unescape_header_text(text[1:-1])
    return text.replace('"', "")


# ==============================================================================
# PARSER
# ==============================================================================


class TextOcciParser:
    """Decode text/occi request headers into a single :class:`InputData`."""

    media_type = MEDIA_TYPE_TEXT_OCCI

    def parse(self, headers: HeaderSource | None, body: bytes | str | None = None) -> list[InputData]:
        """Decode ``headers``; the body of a text/occi request is ignored."""
        return [self.parse_headers(headers)]

    def parse_headers(self, headers: HeaderSource | None) -> InputData:
        data = InputData()
        self.parse_categories(headers, data)
        self.parse_attributes(headers, data)
        self.parse_locations(headers, data)
        shape = _shape_of(data)
        record_decode(self.media_type, shape)
        logger.debug(
            "occi.text.decoded",
            shape=shape,
            kind=data.kind,
            mixins=len(data.mixins),
            attributes=len(data.attributes),
        )
        return data

    def parse_categories(self, headers: HeaderSource | None, data: InputData) -> None:
        """Apply every ``Category`` declaration to ``data``.

        Fragments that do not match the category grammar are skipped.
        """
        for value in header_values(headers, HEADER_CATEGORY):
            for fragment in split_outside_quotes(value):
                match = CATEGORY_PATTERN.match(fragment)
                if match is None:
                    if fragment.strip():
                        logger.debug("occi.text.category_skipped", fragment=fragment)
                    continue
                identifier = category_id(match.group("scheme"), match.group("term"))
                params = {
                    param.group("name").lower(): param.group("value")
                    for param in CATEGORY_PARAM_PATTERN.finditer(match.group("params") or "")
                }
                category_class = match.group("cls").lower()
                if category_class == CLASS_KIND:
                    data.kind = identifier
                elif category_class == CLASS_MIXIN:
                    if "location" in params:
                        data.mixin_tag = identifier
                        data.location = params["location"]
                        data.mixin_tag_title = params.get("title", data.mixin_tag_title)
                    else:
                        data.mixins.add(identifier)
                elif category_class == CLASS_ACTION:
                    data.action = identifier

    def parse_attributes(self, headers: HeaderSource | None, data: InputData) -> None:
        """Collect ``name="value"`` pairs of every ``X-OCCI-Attribute`` header."""
        for value in header_values(headers, HEADER_ATTRIBUTE):
            for fragment in split_outside_quotes(value):
                name, separator, raw = fragment.partition("=")
                if not separator:
                    continue
                name = name.replace('"', "").strip()
                if not name:
                    continue
                data.attributes[name] = _unquote(raw)
        entity_id = data.attributes.get(OCCI_CORE_ID)
        if entity_id:
            data.entity_id = strip_urn(entity_id)

    def parse_locations(self, headers: HeaderSource | None, data: InputData) -> None:
        """Collect every ``X-OCCI-Location`` path, in order."""
        for value in header_values(headers, HEADER_LOCATION):
            for fragment in split_outside_quotes(value):
                location = fragment.strip()
                if location:
                    data.extra_locations.append(location)


def _shape_of(data: InputData) -> str:
    if data.mixin_tag:
        return "mixin_tag"
    if data.kind:
        return "entity"
    if data.action:
        return "action"
    if data.is_empty:
        return "empty"
    return "partial"


# ==============================================================================
# PRESENTER
# ==============================================================================


def category_declaration(category: CategoryRef, category_class: str) -> str:
    return f'{category.term}; scheme="{category.scheme}"; class="{category_class}"'


def attribute_value(value: Any) -> str:
    """Render an attribute value; strings are quoted, numbers and booleans are not."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return f'"{escape_header_text(str(value))}"'


class TextOcciPresenter(OcciPresenter):
    """Presenter producing text/occi header renderings."""

    media_type = MEDIA_TYPE_TEXT_OCCI

    def _response(self, body: str, status: int) -> Response:
        return self._finalise(Response(content=body, status_code=status, media_type=self.media_type))

    def _render_passthrough(self, response: Response, status: int) -> Response:
        body = OK_BODY if status == 200 else passthrough_body(response)
        rendered = Response(content=body, status_code=status, media_type=self.media_type)
        for key, value in passthrough_headers(response):
            rendered.headers.append(key, value)
        return self._finalise(rendered)

    def _render_message(self, message: str, status: int) -> Response:
        return self._response(OK_BODY if status == 200 else message, status)

    def _render_error(self, message: str, status: int, detail: str | None = None) -> Response:
        return self._response(message if detail is None else f"{message}\n{detail}", status)

    def _render_locations(self, locations: list[str], status: int) -> Response:
        response = self._response(OK_BODY, status)
        for location in locations:
            response.headers.append(HEADER_LOCATION, header_location(self.absolute(location)))
        return response

    def _render_views(self, views: list[EntityView], status: int) -> Response:
        # Header space is bounded: only the first entities of a collection are rendered.
        limit = self.settings.header_entity_limit
        if len(views) > limit:
            logger.info("occi.text.entities_truncated", rendered=limit, available=len(views))
        response = self._response(OK_BODY, status)
        for view in views[:limit]:
            for name, value in self.entity_headers(view):
                response.headers.append(name, value)
        return response

    def entity_headers(self, view: EntityView) -> list[tuple[str, str]]:
        """Return the headers describing one entity, in emission order."""
        categories = [category_declaration(view.kind, CLASS_KIND)]
        categories.extend(category_declaration(mixin, CLASS_MIXIN) for mixin in view.mixins)

        attributes: list[tuple[str, Any]] = [(OCCI_CORE_ID, with_urn(view.id))]
        if view.is_link:
            if view.source is not None:
                attributes.append((OCCI_CORE_SOURCE, view.source.location))
            if view.target is not None:
                attributes.append((OCCI_CORE_TARGET, view.target.location))
        if view.title is not None:
            attributes.append((OCCI_CORE_TITLE, view.title))
        if view.summary is not None:
            attributes.append((OCCI_CORE_SUMMARY, view.summary))
        attributes.extend(view.attributes.items())

        location = header_location(self.absolute(view.location))
        headers = [
            (HEADER_CATEGORY, ", ".join(categories)),
            (HEADER_ATTRIBUTE, ", ".join(f"{name}={attribute_value(value)}" for name, value in attributes)),
            (HEADER_LOCATION, location),
        ]
        for action in view.actions:
            headers.append(
                (HEADER_LINK, f'<{location}>; rel="{action.identifier}"; title="{action.term}"')
            )
        return headers

    def _render_interface(self, document: DiscoveryDocument) -> Response:
        declarations = flatten_discovery(document)
        size = sum(len(declaration.encode("utf-8")) for declaration in declarations)
        encodable = all(fits_header(declaration) for declaration in declarations)
        if encodable and size < self.settings.header_budget_bytes:
            response = self._response(OK_BODY, 200)
            for declaration in declarations:
                response.headers.append(HEADER_CATEGORY, declaration)
            return response
        logger.info(
            "occi.text.interface_in_body",
            size=size,
            budget=self.settings.header_budget_bytes,
            encodable=encodable,
        )
        body = "".join(f"{HEADER_CATEGORY}: {declaration}\n" for declaration in declarations)
        return self._response(body, 200)


__all__ = [
    "CATEGORY_PATTERN",
    "TextOcciParser",
    "TextOcciPresenter",
    "attribute_value",
    "category_declaration",
]
