"""In-memory :class:`DomainModel` implementation.

Used by embedding servers that keep their configuration in process and by the
test-suite. Lookups are read-only once registration is finished.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

import structlog

from .attributes import NumberKind, ValueType, WireType, classify, parse_number
from .core import Attribute, Category, Entity, Kind, Mixin

logger = structlog.get_logger(__name__)

_ENUM_TYPE_NAMES = frozenset({"enum", "eenum"})


class ModelRegistry:
    """Registry of locations, extensions and user mixin tags."""

    def __init__(self) -> None:
        self._entity_locations: dict[str, str] = {}
        self._category_locations: dict[str, str] = {}
        self._extensions: dict[str, str] = {}
        self._user_tags: set[tuple[str | None, str]] = set()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register_location(self, obj: Entity | Category, location: str) -> None:
        if isinstance(obj, Entity):
            self._entity_locations[obj.id] = location
        else:
            self._category_locations[obj.identifier] = location

    def register_extension(self, extension_id: str, categories: Iterable[Category]) -> None:
        for category in categories:
            self._extensions[category.identifier] = extension_id

    def register_mixin_tag(self, user: str | None, mixin: Mixin, location: str) -> None:
        self._user_tags.add((user, mixin.identifier))
        self.register_location(mixin, location)
        logger.debug("occi.registry.mixin_tag", user=user, mixin=mixin.identifier, location=location)

    # ------------------------------------------------------------------
    # DomainModel
    # ------------------------------------------------------------------
    def location_of(self, obj: Entity | Category) -> str:
        if isinstance(obj, Entity):
            location = self._entity_locations.get(obj.id)
            return location if location is not None else f"/{obj.kind.term}/{obj.id}"
        location = self._category_locations.get(obj.identifier)
        return location if location is not None else f"/{obj.term}/"

    def attribute_type_of(self, entity: Entity, name: str) -> ValueType | None:
        definition = _find_attribute(entity, name)
        if definition is None or definition.type_name is None:
            return None
        if definition.type_name.strip().lower() in _ENUM_TYPE_NAMES:
            return ValueType.ENUM
        wire_type, _ = classify(definition.type_name)
        if wire_type is WireType.NUMBER:
            return ValueType.NUMBER
        if wire_type is WireType.BOOLEAN:
            return ValueType.BOOLEAN
        if wire_type is WireType.STRING:
            return ValueType.STRING
        return None

    def attribute_value_as_string(self, entity: Entity, name: str) -> str | None:
        if self.attribute_type_of(entity, name) not in (ValueType.STRING, ValueType.ENUM):
            return None
        return entity.attribute(name)

    def attribute_value_as_number(
        self, entity: Entity, name: str
    ) -> int | float | Decimal | None:
        if self.attribute_type_of(entity, name) is not ValueType.NUMBER:
            return None
        value = entity.attribute(name)
        if value is None:
            return None
        definition = _find_attribute(entity, name)
        number_kind: NumberKind | None = None
        if definition is not None:
            _, number_kind = classify(definition.type_name)
        try:
            return parse_number(value, number_kind)
        except ValueError:
            logger.warning(
                "occi.registry.number_value_invalid", entity=entity.id, attribute=name, value=value
            )
            return None

    def extension_of(self, category: Category) -> str:
        return self._extensions.get(category.identifier, category.scheme)

    def is_user_mixin_tag(self, user: str | None, category_id: str) -> bool:
        return (user, category_id) in self._user_tags


def _kind_chain(kind: Kind | None) -> Iterable[Kind]:
    seen: set[str] = set()
    while kind is not None and kind.identifier not in seen:
        seen.add(kind.identifier)
        yield kind
        kind = kind.parent


def _find_attribute(entity: Entity, name: str) -> Attribute | None:
    categories: list[Category] = [*_kind_chain(entity.kind), *entity.mixins]
    for category in categories:
        for attribute in category.attributes:
            if attribute.name == name:
                return attribute
    return None


__all__ = ["ModelRegistry"]
