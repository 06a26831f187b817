"""Node/tree assembler - builds the dialogue tree from parsed node drafts."""

import logging
import re

from dialogue_forge.config import settings
from dialogue_forge.core.diagnostics import DuplicateNodeId, EmptyDocument, ImportResult
from dialogue_forge.core.parser import NodeDraft
from dialogue_forge.schemas.dialogue import (
    Choice,
    ImportedDialogueTree,
    NodePosition,
    NpcNode,
    PlayerNode,
)

logger = logging.getLogger(__name__)

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    slug = _SLUG_INVALID.sub("_", title.lower()).strip("_")
    return slug or "dialogue"


def placeholder_position(ordinal: int) -> NodePosition:
    """Grid position for the ordinal-th accepted node; the editor re-lays out anyway."""
    columns = max(settings.LAYOUT_COLUMNS, 1)
    return NodePosition(
        x=(ordinal % columns) * settings.LAYOUT_X_SPACING,
        y=settings.LAYOUT_Y_OFFSET + (ordinal // columns) * settings.LAYOUT_Y_SPACING,
    )


def build_node(draft: NodeDraft, position: NodePosition) -> NpcNode | PlayerNode:
    common = dict(
        id=draft.node_id,
        content="\n".join(draft.content_lines).strip(),
        speaker=draft.speaker,
        set_flags=list(draft.set_flags) or None,
        position=position,
        next_node_id=draft.next_node_id,
        conditional_blocks=list(draft.blocks) or None,
    )

    if not draft.choices:
        return NpcNode(**common)

    choices = [
        Choice(
            id=f"{draft.node_id}_choice_{index}",
            text=choice.text,
            next_node_id=choice.next_node_id,
            conditions=choice.conditions,
            set_flags=list(choice.set_flags) or None,
        )
        for index, choice in enumerate(draft.choices)
    ]
    return PlayerNode(choices=choices, **common)


def assemble(
    drafts: list[tuple[int, NodeDraft]],
    title: str,
    diagnostics: list,
) -> ImportResult:
    """Turn ``(block_index, draft)`` pairs into an ImportResult.

    ``diagnostics`` already holds what the tokenizer reported; parser and
    assembler diagnostics are appended after it.
    """
    nodes: dict[str, NpcNode | PlayerNode] = {}

    for block_index, draft in drafts:
        if draft.node_id in nodes:
            diagnostics.append(DuplicateNodeId(block_index=block_index, node_id=draft.node_id))
            continue
        diagnostics.extend(draft.diagnostics)
        nodes[draft.node_id] = build_node(draft, placeholder_position(len(nodes)))

    if not nodes:
        diagnostics.append(EmptyDocument())

    tree = ImportedDialogueTree(
        id=slugify(title),
        title=title,
        start_node_id=next(iter(nodes), None),
        nodes=nodes,
    )
    logger.debug("Assembled tree %s with %d node(s)", tree.id, len(nodes))
    return ImportResult(tree=tree, diagnostics=diagnostics)
