"""Parse state machine - turns one node block's classified lines into a node draft.

The parser makes a single forward pass. Its state is always one of:

- ``Idle``: plain node body.
- ``InConditionalBlock``: inside an ``<<if>>`` that branches dialogue content.
  The open arm accumulates in a ``PartialBlock``.
- ``InConditionalChoice``: inside an ``<<if>>`` that guards ``->`` choices.

The same ``<<if>> ... <<endif>>`` syntax serves both purposes. An ``<<if>>``
guards choices when the node has already collected a choice, or when the very
next line is a choice; otherwise it opens a dialogue block. This can misread
an ``<<if>>`` placed before the first choice of a node that has narration
before it. The rule is kept as-is so scripts written for the editor keep
importing the same way.
"""

import logging
from dataclasses import dataclass, field, replace

from dialogue_forge.core.condition_codec import negate_condition, parse_condition_clauses
from dialogue_forge.core.diagnostics import (
    DanglingChoiceGuard,
    UnexpectedDirective,
    UnrecognizedConditionClause,
    UnterminatedConditional,
)
from dialogue_forge.core.set_commands import extract_set_commands, parse_set_command, set_variables
from dialogue_forge.core.tokenizer import LineKind, NodeBlock, ScriptLine, tokenize
from dialogue_forge.schemas.dialogue import BlockType, Condition, ConditionalBlock

logger = logging.getLogger(__name__)


@dataclass
class ChoiceDraft:
    text: str
    conditions: list[Condition] | None = None
    set_flags: list[str] = field(default_factory=list)
    next_node_id: str | None = None

    def add_set_flag(self, variable: str) -> None:
        if variable not in self.set_flags:
            self.set_flags.append(variable)


@dataclass
class PartialBlock:
    """The conditional arm currently being read."""
    type: BlockType
    condition: list[Condition] | None
    choice_mark: int  # number of choices collected before this arm opened
    lines: list[str] = field(default_factory=list)
    speaker: str | None = None
    next_node_id: str | None = None


@dataclass
class NodeDraft:
    """Everything collected for one node; the assembler turns it into a DialogueNode."""
    node_id: str
    content_lines: list[str] = field(default_factory=list)
    speaker: str | None = None
    set_flags: list[str] = field(default_factory=list)
    choices: list[ChoiceDraft] = field(default_factory=list)
    blocks: list[ConditionalBlock] = field(default_factory=list)
    next_node_id: str | None = None
    diagnostics: list = field(default_factory=list)

    def add_set_flag(self, variable: str) -> None:
        if variable not in self.set_flags:
            self.set_flags.append(variable)

    def parse_condition(self, text: str) -> list[Condition]:
        conditions, rejected = parse_condition_clauses(text)
        for clause in rejected:
            self.diagnostics.append(UnrecognizedConditionClause(node_id=self.node_id, raw_clause=clause))
        return conditions

    def unexpected(self, line: ScriptLine, reason: str) -> None:
        self.diagnostics.append(UnexpectedDirective(node_id=self.node_id, line=line.raw, reason=reason))

    def flush(self, partial: PartialBlock) -> None:
        self.blocks.append(
            ConditionalBlock(
                id=f"{self.node_id}_block_{len(self.blocks)}",
                type=partial.type,
                condition=None if partial.type is BlockType.ELSE else partial.condition,
                content="\n".join(partial.lines).strip(),
                speaker=partial.speaker,
                next_node_id=partial.next_node_id,
            )
        )


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class InConditionalBlock:
    block: PartialBlock


@dataclass(frozen=True)
class InConditionalChoice:
    conditions: list[Condition]  # this arm's own condition
    condition_text: str
    used: bool = False
    negated: list[Condition] = field(default_factory=list)  # earlier arms of the chain, negated

    @property
    def guard(self) -> list[Condition]:
        return [*self.negated, *self.conditions]


ParserState = Idle | InConditionalBlock | InConditionalChoice

IDLE = Idle()


def _choices_in_open_arm(state: ParserState, draft: NodeDraft) -> bool:
    """True when the latest choice should own jumps and sets rather than the node or arm."""
    if isinstance(state, InConditionalBlock):
        return len(draft.choices) > state.block.choice_mark
    return bool(draft.choices)


def _close_guard(state: InConditionalChoice, draft: NodeDraft) -> None:
    if state.conditions and not state.used:
        draft.diagnostics.append(DanglingChoiceGuard(node_id=draft.node_id, condition=state.condition_text))


def _next_guard_arm(
    state: InConditionalChoice, line: ScriptLine, draft: NodeDraft, conditions: list[Condition], condition_text: str
) -> InConditionalChoice:
    """Move to the next arm of a choice guard; it also requires every earlier arm to have failed."""
    _close_guard(state, draft)
    negated = list(state.negated)
    if len(state.conditions) == 1:
        negated.append(negate_condition(state.conditions[0]))
    elif state.conditions:
        draft.unexpected(line, "follows a guard with several clauses; its choices are not guarded against the earlier arm")
    return InConditionalChoice(conditions, condition_text, negated=negated)


def _open_arm(block_type: BlockType, line: ScriptLine, draft: NodeDraft) -> InConditionalBlock:
    condition = None if block_type is BlockType.ELSE else draft.parse_condition(line.text)
    return InConditionalBlock(PartialBlock(block_type, condition, choice_mark=len(draft.choices)))


def handle_choice(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    conditions: list[Condition] = []
    if isinstance(state, InConditionalChoice):
        conditions.extend(state.guard)
        state = replace(state, used=True)
    if line.condition:
        conditions.extend(draft.parse_condition(line.condition))

    choice = ChoiceDraft(text=line.text, conditions=conditions or None)
    for variable in set_variables(extract_set_commands(line.text)):
        choice.add_set_flag(variable)
    draft.choices.append(choice)
    return state


def handle_jump(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    if _choices_in_open_arm(state, draft):
        draft.choices[-1].next_node_id = line.text
    elif isinstance(state, InConditionalBlock):
        state.block.next_node_id = line.text
    else:
        draft.next_node_id = line.text
    return state


def handle_set(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    """Attach a set command to the latest choice, the open arm or the node.

    A bare ``<<set $v = true>>`` is stored only as ``v`` in the owner's
    ``set_flags``; export writes it back from there. So a choice text or
    content that already embeds ``<<set $v = true>>`` comes back without it
    after a round trip, with ``v`` in ``set_flags`` instead. Every other
    command stays in the text so its exact operation survives.
    """
    command = parse_set_command(line.text)
    if _choices_in_open_arm(state, draft):
        choice = draft.choices[-1]
        # a bare "= true" is rebuilt from set_flags on export, anything else must travel in the text
        if not command.is_boolean_default:
            choice.text = f"{choice.text} {line.text}".strip()
        choice.add_set_flag(command.variable)
    elif isinstance(state, InConditionalBlock):
        # kept verbatim in the arm, not in the node set_flags
        state.block.lines.append(line.text)
    else:
        if not command.is_boolean_default:
            draft.content_lines.append(line.text)
        draft.add_set_flag(command.variable)
    return state


def handle_if(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    if isinstance(state, InConditionalBlock):
        draft.unexpected(line, "opens a nested conditional; the open arm was closed first")
        draft.flush(state.block)
        return _open_arm(BlockType.IF, line, draft)

    if isinstance(state, InConditionalChoice):
        draft.unexpected(line, "opens a nested choice guard; it replaces the open one")
        _close_guard(state, draft)
        return InConditionalChoice(draft.parse_condition(line.text), line.text)

    guards_choice = bool(draft.choices) or (next_line is not None and next_line.kind is LineKind.CHOICE)
    if guards_choice:
        return InConditionalChoice(draft.parse_condition(line.text), line.text)
    return _open_arm(BlockType.IF, line, draft)


def handle_elseif(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    if isinstance(state, InConditionalBlock):
        if state.block.type is BlockType.ELSE:
            draft.unexpected(line, "follows <<else>> and was ignored")
            return state
        draft.flush(state.block)
        return _open_arm(BlockType.ELSEIF, line, draft)

    if isinstance(state, InConditionalChoice):
        return _next_guard_arm(state, line, draft, draft.parse_condition(line.text), line.text)

    draft.unexpected(line, "has no open <<if>> and was ignored")
    return state


def handle_else(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    if isinstance(state, InConditionalBlock):
        if state.block.type is BlockType.ELSE:
            draft.unexpected(line, "repeats <<else>> and was ignored")
            return state
        draft.flush(state.block)
        return _open_arm(BlockType.ELSE, line, draft)

    if isinstance(state, InConditionalChoice):
        return _next_guard_arm(state, line, draft, [], "")

    draft.unexpected(line, "has no open <<if>> and was ignored")
    return state


def handle_endif(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    if isinstance(state, InConditionalBlock):
        draft.flush(state.block)
        return IDLE

    if isinstance(state, InConditionalChoice):
        _close_guard(state, draft)
        return IDLE

    draft.unexpected(line, "has no open <<if>> and was ignored")
    return state


def handle_text(state: ParserState, line: ScriptLine, next_line: ScriptLine | None, draft: NodeDraft) -> ParserState:
    if isinstance(state, InConditionalBlock):
        target = state.block
        if line.speaker:
            target.speaker = line.speaker
        if line.text:
            target.lines.append(line.text)
        return state

    if line.speaker:
        draft.speaker = line.speaker
    if line.text:
        draft.content_lines.append(line.text)
    return state


HANDLERS = {
    LineKind.CHOICE: handle_choice,
    LineKind.JUMP: handle_jump,
    LineKind.SET: handle_set,
    LineKind.IF: handle_if,
    LineKind.ELSEIF: handle_elseif,
    LineKind.ELSE: handle_else,
    LineKind.ENDIF: handle_endif,
    LineKind.SPEAKER: handle_text,
    LineKind.CONTENT: handle_text,
}


def finish(state: ParserState, draft: NodeDraft) -> None:
    """Close whatever is still open at the end of the body."""
    if isinstance(state, InConditionalBlock):
        draft.flush(state.block)
        draft.diagnostics.append(UnterminatedConditional(node_id=draft.node_id))
    elif isinstance(state, InConditionalChoice):
        _close_guard(state, draft)
        draft.diagnostics.append(UnterminatedConditional(node_id=draft.node_id))


def parse_block(block: NodeBlock) -> NodeDraft:
    """Run the state machine over one node block."""
    draft = NodeDraft(node_id=block.node_id)
    lines = tokenize(block.lines)

    state: ParserState = IDLE
    for position, line in enumerate(lines):
        next_line = lines[position + 1] if position + 1 < len(lines) else None
        state = HANDLERS[line.kind](state, line, next_line, draft)
    finish(state, draft)

    logger.debug(
        "Parsed node %s: %d choice(s), %d conditional block(s)",
        draft.node_id, len(draft.choices), len(draft.blocks),
    )
    return draft
