from __future__ import annotations

import logging

from .attributes import ConnectionIntent, NodeDraft
from .errors import DuplicateLabelError, NoAdjacentNodeError, UnresolvedLabelError
from .grid import Grid
from .types import LabelRef, RelativeRef, ResolvedConnection, ResolvedNode, SelfRef

logger = logging.getLogger(__name__)

# ============================================================================
# Label / reference resolver
#
# Turns every connection destination (label, relative direction or self)
# into the index of the target node. Nothing downstream sees the textual
# form of a destination.
# ============================================================================


def build_label_index(drafts: list[NodeDraft]) -> dict[str, int]:
    """Map each label to the index of the node carrying it."""
    labels: dict[str, int] = {}
    for index, draft in enumerate(drafts):
        if draft.label is None:
            continue
        if draft.label in labels:
            raise DuplicateLabelError(draft.label, draft.line, draft.column)
        labels[draft.label] = index
    return labels


def resolve_references(drafts: list[NodeDraft], grid: Grid) -> list[ResolvedNode]:
    """Resolve all connection destinations and return the chart's nodes."""
    labels = build_label_index(drafts)
    nodes: list[ResolvedNode] = []

    for index, draft in enumerate(drafts):
        connections = [
            ResolvedConnection(
                source=index,
                target=resolve_destination(index, draft, intent, labels, grid),
                source_side=intent.source_side,
                dest_side=intent.dest_side,
                text=intent.text,
                classes=intent.classes,
                arrowheads=intent.arrowheads,
            )
            for intent in draft.intents
        ]
        nodes.append(
            ResolvedNode(
                index=index,
                identifier=draft.identifier,
                row=draft.row,
                col=draft.col,
                label=draft.label,
                text=draft.text,
                classes=draft.classes,
                shape=draft.shape,
                connections=connections,
            )
        )

    logger.debug(
        "resolved %d connections across %d nodes",
        sum(len(node.connections) for node in nodes),
        len(nodes),
    )
    return nodes


def resolve_destination(
    index: int,
    draft: NodeDraft,
    intent: ConnectionIntent,
    labels: dict[str, int],
    grid: Grid,
) -> int:
    """Index of the node a single connection intent points at."""
    destination = intent.destination

    if isinstance(destination, SelfRef):
        return index

    if isinstance(destination, LabelRef):
        target = labels.get(destination.name)
        if target is None:
            raise UnresolvedLabelError(destination.name, intent.line, intent.column)
        return target

    if isinstance(destination, RelativeRef):
        target = grid.neighbor(draft.row, draft.col, destination.direction)
        if target is None:
            raise NoAdjacentNodeError(
                destination.direction, draft.row, draft.col, intent.line, intent.column
            )
        return target

    raise TypeError(f"unsupported destination: {destination!r}")
