from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .errors import (
    DuplicateAttributeError,
    DuplicateDefineEntryError,
    UnknownValueError,
)
from .types import (
    ARROWHEAD_POLICIES,
    DEFAULT_ARROWHEADS,
    DEFAULT_SHAPE,
    NODE_SHAPES,
    ArrowheadPolicy,
    Attribute,
    ConnectionSpec,
    DefineEntry,
    Destination,
    Document,
    NodeShape,
    Side,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Attribute resolver
#
# Merges each grid occurrence's attributes over the `define` entry for its
# identifier. The grid wins on every key it sets; a `connect` list in the
# grid replaces the defined one instead of extending it.
# ============================================================================

AttributeMap = dict[str, Attribute]


@dataclass(slots=True)
class ConnectionIntent:
    """A connection whose destination has not been looked up yet."""

    source_side: Side
    dest_side: Side
    destination: Destination
    text: str | None = None
    classes: tuple[str, ...] = ()
    arrowheads: ArrowheadPolicy = DEFAULT_ARROWHEADS
    line: int = 0
    column: int = 0


@dataclass(slots=True)
class NodeDraft:
    """A grid occurrence with merged attributes but no geometry yet."""

    identifier: str
    row: int
    col: int
    label: str | None = None
    text: str | None = None
    classes: tuple[str, ...] = ()
    shape: NodeShape = DEFAULT_SHAPE
    intents: list[ConnectionIntent] = field(default_factory=list)
    line: int = 0
    column: int = 0


def collect_attributes(attributes: Iterable[Attribute]) -> AttributeMap:
    """Index an attribute list by key, rejecting keys given twice."""
    result: AttributeMap = {}
    for attr in attributes:
        if attr.key in result:
            raise DuplicateAttributeError(attr.key, attr.line, attr.column)
        result[attr.key] = attr
    return result


def merge(base: Mapping[str, Attribute], override: Mapping[str, Attribute]) -> AttributeMap:
    """Merge two attribute maps; keys present in `override` replace `base` whole."""
    merged = dict(base)
    merged.update(override)
    return merged


def build_define_table(definitions: list[DefineEntry]) -> dict[str, AttributeMap]:
    """Map each defined identifier to its validated attributes."""
    table: dict[str, AttributeMap] = {}
    for entry in definitions:
        if entry.identifier in table:
            raise DuplicateDefineEntryError(entry.identifier, entry.line, entry.column)
        attrs = collect_attributes(entry.attributes)
        _validate_node_attributes(attrs)
        table[entry.identifier] = attrs
    return table


def resolve_attributes(document: Document) -> list[NodeDraft]:
    """Produce one NodeDraft per grid occurrence, in row-major order."""
    table = build_define_table(document.definitions)
    drafts: list[NodeDraft] = []

    for row_index, row in enumerate(document.rows):
        for col_index, cell in enumerate(row):
            if cell is None:
                continue

            own = collect_attributes(cell.attributes)
            _validate_node_attributes(own)
            defined = table.get(cell.identifier, {})
            merged = merge(defined, own)

            shape = merged["shape"].value if "shape" in merged else DEFAULT_SHAPE
            text = merged["text"].value if "text" in merged else None
            classes = _merge_classes(defined.get("class"), own.get("class"))
            specs = merged["connect"].value if "connect" in merged else []

            drafts.append(
                NodeDraft(
                    identifier=cell.identifier,
                    row=row_index,
                    col=col_index,
                    label=cell.label,
                    text=text,
                    classes=classes,
                    shape=shape,
                    intents=[_connection_intent(spec) for spec in specs],
                    line=cell.line,
                    column=cell.column,
                )
            )

    unused = set(table) - {draft.identifier for draft in drafts}
    if unused:
        logger.debug("define entries without grid occurrences: %s", sorted(unused))
    logger.debug("resolved attributes for %d nodes", len(drafts))
    return drafts


def split_classes(value: str) -> tuple[str, ...]:
    """Split a class attribute string into de-duplicated class names."""
    return tuple(dict.fromkeys(value.split()))


# ============================================================================
# Internals
# ============================================================================


def _merge_classes(defined: Attribute | None, own: Attribute | None) -> tuple[str, ...]:
    names: list[str] = []
    for attr in (defined, own):
        if attr is not None:
            names.extend(attr.value.split())
    return tuple(dict.fromkeys(names))


def _validate_node_attributes(attrs: AttributeMap) -> None:
    shape = attrs.get("shape")
    if shape is not None and shape.value not in NODE_SHAPES:
        raise UnknownValueError("shape", shape.value, NODE_SHAPES, shape.line, shape.column)

    connect = attrs.get("connect")
    if connect is not None:
        for spec in connect.value:
            _validate_connection_attributes(collect_attributes(spec.attributes))


def _validate_connection_attributes(attrs: AttributeMap) -> None:
    arrowheads = attrs.get("arrowheads")
    if arrowheads is not None and arrowheads.value not in ARROWHEAD_POLICIES:
        raise UnknownValueError(
            "arrowheads",
            arrowheads.value,
            ARROWHEAD_POLICIES,
            arrowheads.line,
            arrowheads.column,
        )


def _connection_intent(spec: ConnectionSpec) -> ConnectionIntent:
    attrs = collect_attributes(spec.attributes)
    return ConnectionIntent(
        source_side=spec.source_side,
        dest_side=spec.dest_side,
        destination=spec.destination,
        text=attrs["text"].value if "text" in attrs else None,
        classes=split_classes(attrs["class"].value) if "class" in attrs else (),
        arrowheads=attrs["arrowheads"].value if "arrowheads" in attrs else DEFAULT_ARROWHEADS,
        line=spec.line,
        column=spec.column,
    )
