"""Domain model objects handed to the codec by the model store.

The codec only reads these objects. Live definitions and entity instances are
owned by the model store behind :class:`~occi_codec.models.collaborators.DomainModel`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .request import OCCI_CORE_SUMMARY, OCCI_CORE_TITLE, category_id

OCCI_CORE_SCHEME = "http://schemas.ogf.org/occi/core#"


@dataclass(slots=True)
class Attribute:
    """Attribute definition declared by a kind, mixin or action."""

    name: str
    type_name: str | None = None
    mutable: bool = True
    required: bool = False
    description: str | None = None
    default: str | None = None


@dataclass(slots=True, eq=False)
class Category:
    """Base class for kinds, mixins and actions.

    Categories compare and hash by their identifier only.
    """

    scheme: str
    term: str
    title: str | None = None
    attributes: list[Attribute] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        return category_id(self.scheme, self.term)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash(self.identifier)


@dataclass(slots=True, eq=False)
class Action(Category):
    """Invokable operation of a kind or mixin."""


@dataclass(slots=True, eq=False)
class Kind(Category):
    """Primary type classifier of a resource or link."""

    actions: list[Action] = field(default_factory=list)
    parent: Kind | None = None


@dataclass(slots=True, eq=False)
class Mixin(Category):
    """Composable capability classifier; a mixin tag carries no attributes."""

    actions: list[Action] = field(default_factory=list)
    depends: list[Mixin] = field(default_factory=list)


@dataclass(slots=True)
class AttributeState:
    """Stored value of one attribute on an entity instance."""

    name: str
    value: str | None = None


@dataclass(slots=True)
class Entity:
    """Common part of resources and links."""

    id: str
    kind: Kind
    mixins: list[Mixin] = field(default_factory=list)
    attributes: list[AttributeState] = field(default_factory=list)
    title: str | None = None
    summary: str | None = None

    def attribute(self, name: str) -> str | None:
        """Return the stored value of ``name`` or ``None``."""
        for state in self.attributes:
            if state.name == name:
                return state.value
        return None

    @property
    def effective_title(self) -> str | None:
        return self.title if self.title is not None else self.attribute(OCCI_CORE_TITLE)

    @property
    def effective_summary(self) -> str | None:
        return self.summary if self.summary is not None else self.attribute(OCCI_CORE_SUMMARY)


@dataclass(slots=True)
class Resource(Entity):
    """Entity that may own outgoing links."""

    links: list[Link] = field(default_factory=list, repr=False, compare=False)


@dataclass(slots=True)
class Link(Entity):
    """Entity joining a source resource to a target resource."""

    source: Resource | None = field(default=None, repr=False, compare=False)
    target: Resource | None = field(default=None, repr=False, compare=False)


__all__ = [
    "OCCI_CORE_SCHEME",
    "Action",
    "Attribute",
    "AttributeState",
    "Category",
    "Entity",
    "Kind",
    "Link",
    "Mixin",
    "Resource",
]
