"""Data models shared by the OCCI parsers and presenters."""

from .attributes import NumberKind, ValueType, WireType, classify, coerce_default
from .collaborators import DomainModel
from .core import (
    OCCI_CORE_SCHEME,
    Action,
    Attribute,
    AttributeState,
    Category,
    Entity,
    Kind,
    Link,
    Mixin,
    Resource,
)
from .registry import ModelRegistry
from .request import (
    RESERVED_ATTRIBUTES,
    URN_UUID_PREFIX,
    InputData,
    NormalizedRequest,
    category_id,
    strip_urn,
    with_urn,
)

__all__ = [
    "OCCI_CORE_SCHEME",
    "RESERVED_ATTRIBUTES",
    "URN_UUID_PREFIX",
    "Action",
    "Attribute",
    "AttributeState",
    "Category",
    "DomainModel",
    "Entity",
    "InputData",
    "Kind",
    "Link",
    "Mixin",
    "ModelRegistry",
    "NormalizedRequest",
    "NumberKind",
    "Resource",
    "ValueType",
    "WireType",
    "category_id",
    "classify",
    "coerce_default",
    "strip_urn",
    "with_urn",
]
