"""Discovery document (``/-/``) construction.

The document is built once as a :class:`DiscoveryDocument` and then either
dumped as JSON or flattened into text/occi category declarations by
:func:`flatten_discovery`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import structlog

from occi_codec.models.attributes import WireType, classify, coerce_default
from occi_codec.models.collaborators import DomainModel
from occi_codec.models.core import OCCI_CORE_SCHEME, Action, Attribute, Category, Kind, Mixin
from occi_codec.models.wire import (
    ActionInterface,
    AttributePattern,
    AttributeSchema,
    DiscoveryDocument,
    KindInterface,
    MixinInterface,
    ModelInterface,
)

logger = structlog.get_logger(__name__)

TCategory = TypeVar("TCategory", bound=Category)


def filter_categories(
    categories: Sequence[TCategory], category_filter: str | None
) -> list[TCategory]:
    """Keep the categories whose term or identifier equals ``category_filter``."""
    if not category_filter:
        return list(categories)
    return [
        category
        for category in categories
        if category_filter in (category.term, category.identifier)
    ]


def attribute_schema(attribute: Attribute) -> AttributeSchema:
    wire_type, _ = classify(attribute.type_name)
    schema = AttributeSchema(
        mutable=attribute.mutable,
        required=attribute.required,
        type=wire_type.value,
        description=attribute.description,
    )
    if attribute.default is not None:
        try:
            schema.default = coerce_default(attribute.default, attribute.type_name)
        except ValueError as exc:
            logger.error(
                "occi.discovery.default_invalid",
                attribute=attribute.name,
                default=attribute.default,
                type_name=attribute.type_name,
                error=str(exc),
            )
    if wire_type is not WireType.STRING:
        # Constraint expressions are not modelled yet; the slot is kept empty.
        schema.pattern = AttributePattern(type=wire_type.value, pattern="")
    return schema


def attribute_schemas(attributes: Sequence[Attribute]) -> dict[str, AttributeSchema]:
    return {attribute.name: attribute_schema(attribute) for attribute in attributes}


def action_interface(action: Action) -> ActionInterface:
    return ActionInterface(
        scheme=action.scheme,
        term=action.term,
        title=action.title,
        attributes=attribute_schemas(action.attributes),
    )


def _group(models: dict[str, ModelInterface], model_id: str) -> ModelInterface:
    group = models.get(model_id)
    if group is None:
        group = ModelInterface(id=model_id)
        models[model_id] = group
    return group


def _add_actions(group: ModelInterface, actions: Sequence[Action]) -> None:
    known = {action.scheme + action.term for action in group.actions}
    for action in actions:
        if action.identifier in known:
            continue
        known.add(action.identifier)
        group.actions.append(action_interface(action))


def build_discovery(
    kinds: Sequence[Kind],
    mixins: Sequence[Mixin],
    model: DomainModel,
    *,
    user: str | None = None,
) -> DiscoveryDocument:
    """Group kinds, mixins and their actions by owning extension.

    Mixin tags owned by ``user`` are grouped under their own scheme.
    """
    models: dict[str, ModelInterface] = {}

    for kind in kinds:
        group = _group(models, model.extension_of(kind))
        group.kinds.append(
            KindInterface(
                scheme=kind.scheme,
                term=kind.term,
                title=kind.title,
                location=model.location_of(kind),
                attributes=attribute_schemas(kind.attributes),
                actions=[action.identifier for action in kind.actions],
                parent=kind.parent.identifier if kind.parent is not None else None,
            )
        )
        _add_actions(group, kind.actions)

    for mixin in mixins:
        if model.is_user_mixin_tag(user, mixin.identifier):
            group = _group(models, mixin.scheme)
        else:
            group = _group(models, model.extension_of(mixin))
        group.mixins.append(
            MixinInterface(
                scheme=mixin.scheme,
                term=mixin.term,
                title=mixin.title,
                location=model.location_of(mixin),
                attributes=attribute_schemas(mixin.attributes),
                actions=[action.identifier for action in mixin.actions],
                rel=[depend.identifier for depend in mixin.depends] or None,
            )
        )
        _add_actions(group, mixin.actions)

    logger.info(
        "occi.discovery.built",
        models=len(models),
        kinds=len(kinds),
        mixins=len(mixins),
        user=user,
    )
    return DiscoveryDocument(model=list(models.values()))


# ==============================================================================
# TEXT/OCCI FLATTENING
# ==============================================================================


def _quoted(name: str, value: str) -> str:
    return f'{name}="{value}"'


def _attributes_declaration(attributes: dict[str, AttributeSchema]) -> str | None:
    if not attributes:
        return None
    rendered: list[str] = []
    for name, schema in attributes.items():
        flags = []
        if not schema.mutable:
            flags.append("immutable")
        if schema.required:
            flags.append("required")
        rendered.append(f"{name}{{{' '.join(flags)}}}" if flags else name)
    return _quoted("attributes", " ".join(rendered))


def _declaration(
    term: str,
    scheme: str,
    category_class: str,
    *,
    title: str | None = None,
    rel: str | None = None,
    location: str | None = None,
    attributes: dict[str, AttributeSchema] | None = None,
    actions: Sequence[str] = (),
) -> str:
    parts = [term, _quoted("scheme", scheme), _quoted("class", category_class)]
    if title is not None:
        parts.append(_quoted("title", title))
    if rel:
        parts.append(_quoted("rel", rel))
    if location is not None:
        parts.append(_quoted("location", location))
    rendered_attributes = _attributes_declaration(attributes or {})
    if rendered_attributes:
        parts.append(rendered_attributes)
    if actions:
        parts.append(_quoted("actions", " ".join(actions)))
    return "; ".join(parts)


def flatten_discovery(document: DiscoveryDocument) -> list[str]:
    """Flatten ``document`` into text/occi category declarations.

    Kinds of the OCCI core scheme are left out of the text rendering.
    """
    declarations: list[str] = []
    for group in document.model:
        for kind in group.kinds:
            if kind.scheme == OCCI_CORE_SCHEME:
                continue
            declarations.append(
                _declaration(
                    kind.term,
                    kind.scheme,
                    "kind",
                    title=kind.title,
                    rel=kind.parent,
                    location=kind.location,
                    attributes=kind.attributes,
                    actions=kind.actions,
                )
            )
        for mixin in group.mixins:
            declarations.append(
                _declaration(
                    mixin.term,
                    mixin.scheme,
                    "mixin",
                    title=mixin.title,
                    rel=" ".join(mixin.rel or ()),
                    location=mixin.location,
                    attributes=mixin.attributes,
                    actions=mixin.actions,
                )
            )
        for action in group.actions:
            declarations.append(
                _declaration(
                    action.term,
                    action.scheme,
                    "action",
                    title=action.title,
                    attributes=action.attributes,
                )
            )
    return declarations


__all__ = [
    "action_interface",
    "attribute_schema",
    "attribute_schemas",
    "build_discovery",
    "filter_categories",
    "flatten_discovery",
]
