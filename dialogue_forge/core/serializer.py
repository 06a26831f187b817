"""Serializer - writes a dialogue tree back out as script text.

Output for one node, in order: header, content, conditional chains,
remaining flag defaults, then the node jump (npc-like nodes) or the node
jump followed by the choices (player nodes). The output is shaped so that
importing it again and re-exporting gives the same text.
"""

import logging

from dialogue_forge.config import settings
from dialogue_forge.core.condition_codec import format_condition
from dialogue_forge.core.set_commands import (
    extract_set_commands,
    format_set_command,
    remove_set_commands,
    set_variables,
)
from dialogue_forge.schemas.dialogue import (
    BlockType,
    Choice,
    ConditionalBlock,
    DialogueTree,
    PlayerNode,
    StoryletCall,
)

logger = logging.getLogger(__name__)

NODE_TITLE_PREFIX = "title: "
NODE_SEPARATOR = "---"
NODE_END = "==="
OPTION_PREFIX = "-> "
ELSE_COMMAND = "<<else>>"
ENDIF_COMMAND = "<<endif>>"
ALWAYS_TRUE = "true"

# marker written in place of a storylet/detour call whose start node is unknown
CALL_LABELS = {"storylet": "Storylet", "detour": "Detour"}


class ScriptTextBuilder:
    """Line-level writer; every method appends exactly the syntax it is named after."""

    def __init__(self, indent: str | None = None):
        self.lines: list[str] = []
        self.indent_unit = settings.SCRIPT_INDENT if indent is None else indent

    def _prefix(self, indent: int) -> str:
        return self.indent_unit * indent

    def add_node_title(self, node_id: str) -> "ScriptTextBuilder":
        self.lines.append(f"{NODE_TITLE_PREFIX}{node_id}\n")
        return self

    def add_node_separator(self) -> "ScriptTextBuilder":
        self.lines.append(f"{NODE_SEPARATOR}\n")
        return self

    def add_line(self, content: str, speaker: str | None = None, indent: int = 0) -> "ScriptTextBuilder":
        """One output line per content line, each carrying the speaker prefix."""
        for line in content.splitlines():
            line = line.strip()
            if not line:
                continue
            text = f"{speaker}: {line}" if speaker else line
            self.lines.append(f"{self._prefix(indent)}{text}\n")
        return self

    def add_option(self, text: str, indent: int = 0) -> "ScriptTextBuilder":
        self.lines.append(f"{self._prefix(indent)}{OPTION_PREFIX}{text}\n")
        return self

    def add_conditional(self, block_type: BlockType, condition: str = "") -> "ScriptTextBuilder":
        if block_type is BlockType.ELSE:
            self.lines.append(f"{ELSE_COMMAND}\n")
        else:
            self.lines.append(f"<<{block_type.value} {condition or ALWAYS_TRUE}>>\n")
        return self

    def add_end_conditional(self) -> "ScriptTextBuilder":
        self.lines.append(f"{ENDIF_COMMAND}\n")
        return self

    def add_jump(self, target: str, indent: int = 0) -> "ScriptTextBuilder":
        self.lines.append(f"{self._prefix(indent)}<<jump {target}>>\n")
        return self

    def add_command(self, command: str, indent: int = 0) -> "ScriptTextBuilder":
        """Append an already formatted ``<<...>>`` command."""
        self.lines.append(f"{self._prefix(indent)}{command}\n")
        return self

    def add_node_end(self) -> "ScriptTextBuilder":
        self.lines.append(f"{NODE_END}\n\n")
        return self

    def build(self) -> str:
        return "".join(self.lines)


class NodeBlockBuilder:
    """Builds one complete ``title: ... ===`` block.

    Tracks which variables already have a recovered set command so the
    ``set_flags`` fallback does not print them twice.
    """

    def __init__(self, node_id: str, indent: str | None = None):
        self.node_id = node_id
        self.builder = ScriptTextBuilder(indent)
        self.covered: set[str] = set()

    def start_node(self) -> "NodeBlockBuilder":
        self.builder.add_node_title(self.node_id).add_node_separator()
        return self

    def _add_body(self, content: str, speaker: str | None, indent: int) -> list[str]:
        commands = extract_set_commands(content)
        self.builder.add_line(remove_set_commands(content), speaker, indent)
        for command in commands:
            self.builder.add_command(command, indent)
        return commands

    def add_content(self, content: str, speaker: str | None = None) -> "NodeBlockBuilder":
        commands = self._add_body(content, speaker, indent=0)
        self.covered.update(set_variables(commands))
        return self

    def add_conditional_blocks(self, blocks: list[ConditionalBlock] | None) -> "NodeBlockBuilder":
        """Write each if/elseif/else chain, closing it before the next ``if``."""
        if not blocks:
            return self

        for position, block in enumerate(blocks):
            if block.type is BlockType.IF and position > 0:
                self.builder.add_end_conditional()
            condition = "" if block.type is BlockType.ELSE else format_condition(block.condition)
            self.builder.add_conditional(block.type, condition)
            # arm commands do not cover the node-level set_flags
            self._add_body(block.content, block.speaker, indent=1)
            if block.next_node_id:
                self.builder.add_jump(block.next_node_id, indent=1)
        self.builder.add_end_conditional()
        return self

    def add_flag_defaults(self, flags: list[str] | None, covered: set[str], indent: int = 0) -> "NodeBlockBuilder":
        for flag in flags or []:
            if flag not in covered:
                self.builder.add_command(format_set_command(flag), indent)
        return self

    def add_set_flags(self, flags: list[str] | None) -> "NodeBlockBuilder":
        return self.add_flag_defaults(flags, self.covered)

    def add_choice(self, choice: Choice) -> "NodeBlockBuilder":
        condition = format_condition(choice.conditions)
        if condition:
            self.builder.add_conditional(BlockType.IF, condition)

        commands = extract_set_commands(choice.text)
        self.builder.add_option(remove_set_commands(choice.text).replace("\n", " "))
        for command in commands:
            self.builder.add_command(command, indent=1)
        self.add_flag_defaults(choice.set_flags, set(set_variables(commands)), indent=1)
        if choice.next_node_id:
            self.builder.add_jump(choice.next_node_id, indent=1)

        if condition:
            self.builder.add_end_conditional()
        return self

    def add_jump(self, target: str | None) -> "NodeBlockBuilder":
        if target:
            self.builder.add_jump(target)
        return self

    def end_node(self) -> "NodeBlockBuilder":
        self.builder.add_node_end()
        return self

    def build(self) -> str:
        return self.builder.build()


def call_start_node(node_type: str, call: StoryletCall) -> str:
    """Where a storylet or detour call enters the other graph.

    Without an explicit start node the jump goes to the placeholder title
    ``<kind>_<graph>_start``; the other graph itself is not exported here.
    """
    return call.target_start_node_id or f"{node_type}_{call.target_graph_id}_start"


def serialize_node(node) -> str:
    """Serialize any dialogue node; fields a node kind lacks are simply skipped."""
    block = NodeBlockBuilder(node.id).start_node()
    call = getattr(node, "storylet_call", None)
    if call is not None and not call.target_start_node_id:
        block.add_content(f"[{CALL_LABELS[node.type]}: {call.target_graph_id}]", node.speaker)
    else:
        block.add_content(node.content, node.speaker)
    block.add_conditional_blocks(getattr(node, "conditional_blocks", None))
    block.add_set_flags(node.set_flags)
    if call is not None:
        block.add_jump(call_start_node(node.type, call))
    else:
        block.add_jump(getattr(node, "next_node_id", None))

    if isinstance(node, PlayerNode):
        for choice in node.choices:
            block.add_choice(choice)

    return block.end_node().build()


def serialize_tree(tree: DialogueTree) -> str:
    if not tree.nodes:
        return ""
    script = "".join(serialize_node(node) for node in tree.nodes.values())
    logger.debug("Serialized tree %s: %d node(s)", tree.id, len(tree.nodes))
    return script
