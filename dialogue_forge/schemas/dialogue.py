"""Dialogue graph Pydantic schemas.

Python attributes are snake_case; JSON uses the editor's camelCase names
(``startNodeId``, ``nextNodeId``, ``setFlags`` ...). Both are accepted on input.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import AfterValidator, BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

MODEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}

# Script titles end at the first whitespace, so node ids must not contain any
NodeRef = Annotated[str, Field(pattern=r"^\S+$")]


class ConditionOperator(str, Enum):
    IS_SET = "is_set"
    IS_NOT_SET = "is_not_set"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"


class BlockType(str, Enum):
    IF = "if"
    ELSEIF = "elseif"
    ELSE = "else"


class Condition(BaseModel):
    """A single presence test or comparison against a flag."""
    flag: str
    operator: ConditionOperator
    value: str | bool | int | float | None = None  # omitted for is_set / is_not_set

    model_config = MODEL_CONFIG


class Choice(BaseModel):
    """A player-selectable branch of a player node."""
    id: str
    text: str
    next_node_id: str | None = None
    # None = always available; [] = guard slot with nothing in it yet (same meaning)
    conditions: list[Condition] | None = None
    set_flags: list[str] | None = None

    model_config = MODEL_CONFIG


class ConditionalBlock(BaseModel):
    """One arm of an if/elseif/else chain of dialogue content."""
    id: str
    type: BlockType
    condition: list[Condition] | None = None  # always None for else arms
    content: str = ""
    speaker: str | None = None
    next_node_id: str | None = None

    model_config = MODEL_CONFIG


class StoryletCallMode(str, Enum):
    JUMP = "JUMP"
    DETOUR_RETURN = "DETOUR_RETURN"


class StoryletCall(BaseModel):
    """A hand-off from a storylet or detour node into another dialogue graph."""
    mode: StoryletCallMode = StoryletCallMode.JUMP
    target_graph_id: int | NodeRef
    target_start_node_id: NodeRef | None = None  # None = the graph's own start node
    return_node_id: NodeRef | None = None  # where a detour resumes in this graph

    model_config = MODEL_CONFIG


class NodePosition(BaseModel):
    """Canvas coordinates. Owned by the layout subsystem, never meaningful to the converter."""
    x: float = 0
    y: float = 0


def check_block_chains(blocks: list[ConditionalBlock] | None) -> list[ConditionalBlock] | None:
    """Each chain opens with ``if``, then any ``elseif`` arms, then at most one ``else``."""
    if not blocks:
        return blocks
    previous: BlockType | None = None
    for block in blocks:
        if block.type is not BlockType.IF and previous in (None, BlockType.ELSE):
            raise ValueError(
                f"conditional block {block.id!r} ({block.type.value}) must follow an if or elseif arm"
            )
        previous = block.type
    return blocks


BlockChain = Annotated[list[ConditionalBlock] | None, AfterValidator(check_block_chains)]


class BaseDialogueNode(BaseModel):
    id: NodeRef
    content: str = ""
    speaker: str | None = None
    character_id: str | None = None
    set_flags: list[str] | None = None  # flags applied on node entry
    position: NodePosition = Field(default_factory=NodePosition)

    model_config = MODEL_CONFIG


class NpcNode(BaseDialogueNode):
    """Character line(s), optionally branched by conditional blocks."""
    type: Literal["npc"] = "npc"
    next_node_id: str | None = None
    conditional_blocks: BlockChain = None


class PlayerNode(BaseDialogueNode):
    """A node that offers choices to the player."""
    type: Literal["player"] = "player"
    choices: list[Choice] = Field(default_factory=list)
    next_node_id: str | None = None
    # Dialogue arms that precede the choices in the script
    conditional_blocks: BlockChain = None


class ConditionalNode(BaseDialogueNode):
    """A pure branch node: every outgoing edge hangs off a conditional block."""
    type: Literal["conditional"] = "conditional"
    conditional_blocks: BlockChain = Field(default_factory=list)


class StoryletNode(BaseDialogueNode):
    type: Literal["storylet"] = "storylet"
    next_node_id: str | None = None
    storylet_call: StoryletCall | None = None


class StoryletPoolNode(BaseDialogueNode):
    type: Literal["storyletPool"] = "storyletPool"
    next_node_id: str | None = None


class RandomizerNode(BaseDialogueNode):
    type: Literal["randomizer"] = "randomizer"
    next_node_id: str | None = None


class DetourNode(BaseDialogueNode):
    type: Literal["detour"] = "detour"
    next_node_id: str | None = None
    storylet_call: StoryletCall | None = None


DialogueNode = Annotated[
    Union[
        NpcNode,
        PlayerNode,
        ConditionalNode,
        StoryletNode,
        StoryletPoolNode,
        RandomizerNode,
        DetourNode,
    ],
    Field(discriminator="type"),
]

# The importer only ever produces these two kinds
ImportedNode = Annotated[Union[NpcNode, PlayerNode], Field(discriminator="type")]


class DialogueTree(BaseModel):
    """A whole dialogue graph: nodes keyed by id plus the entry node."""
    id: str
    title: str
    start_node_id: str | None = None  # None only for an empty tree
    nodes: dict[str, DialogueNode] = Field(default_factory=dict)

    model_config = MODEL_CONFIG

    @model_validator(mode="after")
    def check_graph(self):
        for key, node in self.nodes.items():
            if key != node.id:
                raise ValueError(f"node key {key!r} does not match node id {node.id!r}")
        if self.nodes and self.start_node_id not in self.nodes:
            raise ValueError(f"start node {self.start_node_id!r} is not in the tree")
        return self


class ImportedDialogueTree(DialogueTree):
    """What ``import_yarn`` returns: a tree of npc and player nodes only.

    Richer kinds (conditional, storylet, ...) are never reconstructed from a
    script; use ``upgrade_tree`` to promote nodes explicitly.
    """
    nodes: dict[str, ImportedNode] = Field(default_factory=dict)
