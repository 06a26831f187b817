"""Explicit node upgrades applied after import.

Import only ever yields npc and player nodes. An npc node whose whole body is
an if/elseif/else chain is what a ``conditional`` node exports to, so it can
be promoted back on request.
"""

import logging

from dialogue_forge.schemas.dialogue import ConditionalNode, DialogueTree, NpcNode

logger = logging.getLogger(__name__)


def can_promote(node) -> bool:
    return (
        isinstance(node, NpcNode)
        and bool(node.conditional_blocks)
        and not node.content
        and not node.speaker
        and not node.next_node_id
    )


def promote_to_conditional(node: NpcNode) -> ConditionalNode:
    """Turn a blocks-only npc node into a conditional node.

    Raises:
        ValueError: if the node carries anything besides its conditional blocks.
    """
    if not can_promote(node):
        raise ValueError(f"Node {node.id!r} is not a blocks-only npc node")
    return ConditionalNode(
        id=node.id,
        character_id=node.character_id,
        set_flags=list(node.set_flags) if node.set_flags else None,
        position=node.position.model_copy(),
        conditional_blocks=[block.model_copy(deep=True) for block in node.conditional_blocks],
    )


def upgrade_tree(tree: DialogueTree) -> DialogueTree:
    """Return a new tree with every eligible node promoted; the input is left as-is."""
    nodes = {}
    promoted = 0
    for node_id, node in tree.nodes.items():
        if can_promote(node):
            nodes[node_id] = promote_to_conditional(node)
            promoted += 1
        else:
            nodes[node_id] = node.model_copy(deep=True)

    logger.info("Upgraded tree %s: %d node(s) promoted to conditional", tree.id, promoted)
    return DialogueTree(id=tree.id, title=tree.title, start_node_id=tree.start_node_id, nodes=nodes)
