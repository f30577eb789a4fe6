"""Interface the codec requires from the domain model store."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from .attributes import ValueType
from .core import Category, Entity


@runtime_checkable
class DomainModel(Protocol):
    """Read-only lookup service answering location and attribute queries.

    Implementations must be safe to call concurrently; the codec never writes
    through this interface.
    """

    def location_of(self, obj: Entity | Category) -> str:
        """Return the path of an entity or the collection path of a category."""

    def attribute_type_of(self, entity: Entity, name: str) -> ValueType | None:
        """Return the declared value type of ``name`` on ``entity``, if known."""

    def attribute_value_as_string(self, entity: Entity, name: str) -> str | None:
        """Return the value of a string or enum attribute, otherwise ``None``."""

    def attribute_value_as_number(self, entity: Entity, name: str) -> int | float | Decimal | None:
        """Return the value of a numeric attribute, otherwise ``None``."""

    def extension_of(self, category: Category) -> str:
        """Return the identifier of the extension declaring ``category``."""

    def is_user_mixin_tag(self, user: str | None, category_id: str) -> bool:
        """Return ``True`` when ``category_id`` is a mixin tag owned by ``user``."""


__all__ = ["DomainModel"]
