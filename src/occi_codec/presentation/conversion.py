"""Entity to wire conversion shared by both OCCI wire formats.

Entities are first flattened into an :class:`EntityView`, a format-neutral
structure holding category references, dedicated reserved fields and
attribute values already coerced to their declared type. The text/occi and
JSON presenters then serialise views independently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from occi_codec.models.attributes import ValueType, json_number, parse_boolean, parse_number
from occi_codec.models.collaborators import DomainModel
from occi_codec.models.core import Category, Entity, Link, Resource
from occi_codec.models.request import RESERVED_ATTRIBUTES

logger = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class CategoryRef:
    scheme: str
    term: str

    @property
    def identifier(self) -> str:
        return self.scheme + self.term

    @classmethod
    def of(cls, category: Category) -> CategoryRef:
        return cls(scheme=category.scheme, term=category.term)


@dataclass(slots=True)
class EndpointView:
    location: str
    kind: str | None = None


@dataclass(slots=True)
class EntityView:
    """Format-neutral rendering of a resource or link."""

    id: str
    kind: CategoryRef
    location: str
    mixins: list[CategoryRef] = field(default_factory=list)
    actions: list[CategoryRef] = field(default_factory=list)
    title: str | None = None
    summary: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    source: EndpointView | None = None
    target: EndpointView | None = None
    links: list[EntityView] = field(default_factory=list)
    is_link: bool = False


def typed_attribute_value(
    model: DomainModel, entity: Entity, name: str, raw: str | None
) -> Any:
    """Return the value of ``name`` in its declared type.

    Typed lookups from the domain model win over the stored string; an
    unknown type, or a stored value that does not parse, is emitted as string.
    """
    value_type = model.attribute_type_of(entity, name)
    if value_type in (ValueType.STRING, ValueType.ENUM):
        text = model.attribute_value_as_string(entity, name)
        return text if text is not None else raw
    if value_type is ValueType.NUMBER:
        number = model.attribute_value_as_number(entity, name)
        if number is not None:
            return json_number(number)
        if raw is None:
            return None
        try:
            return json_number(parse_number(raw, None))
        except ValueError:
            logger.warning("occi.render.number_fallback", entity=entity.id, attribute=name)
            return raw
    if value_type is ValueType.BOOLEAN:
        if raw is None:
            return None
        try:
            return parse_boolean(raw)
        except ValueError:
            logger.warning("occi.render.boolean_fallback", entity=entity.id, attribute=name)
            return raw
    return raw


def _endpoint(model: DomainModel, resource: Resource | None) -> EndpointView | None:
    if resource is None:
        return None
    return EndpointView(location=model.location_of(resource), kind=resource.kind.identifier)


def to_view(model: DomainModel, entity: Entity, *, nested: bool = True) -> EntityView:
    """Convert ``entity`` into an :class:`EntityView`.

    Args:
        model: Domain model answering location and typed value lookups.
        entity: Resource or link to convert.
        nested: Whether the links owned by a resource are converted too.
    """
    attributes: dict[str, Any] = {}
    for state in entity.attributes:
        if state.name in RESERVED_ATTRIBUTES:
            continue
        value = typed_attribute_value(model, entity, state.name, state.value)
        # Attributes without a value are not rendered.
        if value is not None:
            attributes[state.name] = value

    view = EntityView(
        id=entity.id,
        kind=CategoryRef.of(entity.kind),
        location=model.location_of(entity),
        mixins=[CategoryRef.of(mixin) for mixin in entity.mixins],
        actions=[CategoryRef.of(action) for action in entity.kind.actions],
        title=entity.effective_title,
        summary=entity.effective_summary,
        attributes=attributes,
    )
    if isinstance(entity, Link):
        view.is_link = True
        view.source = _endpoint(model, entity.source)
        view.target = _endpoint(model, entity.target)
    elif isinstance(entity, Resource) and nested:
        view.links = [to_view(model, link, nested=False) for link in entity.links]
    return view


__all__ = [
    "CategoryRef",
    "EndpointView",
    "EntityView",
    "to_view",
    "typed_attribute_value",
]
