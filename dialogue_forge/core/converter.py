"""Converter entry points: script text <-> dialogue tree."""

import logging

from dialogue_forge.config import settings
from dialogue_forge.core.assembler import assemble
from dialogue_forge.core.diagnostics import ImportResult, MalformedNodeBlock
from dialogue_forge.core.parser import parse_block
from dialogue_forge.core.serializer import serialize_tree
from dialogue_forge.core.tokenizer import read_block, split_blocks
from dialogue_forge.schemas.dialogue import DialogueTree

logger = logging.getLogger(__name__)


def import_yarn(script_text: str, title: str | None = None) -> ImportResult:
    """Parse a script into a tree of npc/player nodes.

    Never raises on malformed text; anything skipped or guessed at is listed
    in ``ImportResult.diagnostics``.
    """
    diagnostics: list = []
    drafts = []

    for index, raw in enumerate(split_blocks(script_text)):
        block = read_block(index, raw)
        if isinstance(block, MalformedNodeBlock):
            diagnostics.append(block)
            continue
        drafts.append((index, parse_block(block)))

    result = assemble(drafts, title or settings.DEFAULT_IMPORT_TITLE, diagnostics)
    logger.debug(
        "Imported %d node(s) with %d diagnostic(s)", len(result.tree.nodes), len(result.diagnostics)
    )
    return result


def export_yarn(tree: DialogueTree) -> str:
    """Serialize a tree to script text; an empty tree gives ``""``."""
    return serialize_tree(tree)
