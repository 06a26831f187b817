"""Script tokenizer - splits a script into node blocks and classifies body lines.

A script is a sequence of blocks separated by ``===`` lines::

    title: start
    ---
    Guard: Halt!
    <<jump next>>
    ===

Every non-empty body line gets exactly one ``LineKind`` before the parser
sees it, so the recognized grammar lives in this module only.
"""

import re
from dataclasses import dataclass
from enum import Enum

from dialogue_forge.core.diagnostics import MalformedNodeBlock
from dialogue_forge.core.set_commands import SET_COMMAND_PATTERN

NODE_END_PATTERN = re.compile(r"^[ \t]*===[ \t]*$", re.MULTILINE)
SEPARATOR_PATTERN = re.compile(r"^[ \t]*---[ \t]*$", re.MULTILINE)
TITLE_PATTERN = re.compile(r"title:\s*(\S+)")

CHOICE_PREFIX = "->"
JUMP_PATTERN = re.compile(r"<<jump\s+(\S+?)\s*>>")
IF_PATTERN = re.compile(r"<<if\s+(.+?)\s*>>")
ELSEIF_PATTERN = re.compile(r"<<elseif\s+(.+?)\s*>>")
ELSE_PATTERN = re.compile(r"<<else\s*>>")
ENDIF_PATTERN = re.compile(r"<<endif\s*>>")
# Yarn line condition on an option: "-> Pay the toll <<if $gold >= 5>>"
INLINE_CHOICE_CONDITION = re.compile(r"^(.*?)\s*<<if\s+(.+?)\s*>>$")


class LineKind(str, Enum):
    CHOICE = "choice"
    JUMP = "jump"
    SET = "set"
    IF = "if"
    ELSEIF = "elseif"
    ELSE = "else"
    ENDIF = "endif"
    SPEAKER = "speaker"
    CONTENT = "content"


@dataclass(frozen=True)
class ScriptLine:
    """One classified body line.

    ``text`` carries the payload: choice text, jump target, condition text,
    spoken content or the raw set command, depending on ``kind``.
    """
    kind: LineKind
    raw: str
    text: str = ""
    speaker: str | None = None
    condition: str | None = None  # inline <<if>> on a choice line


@dataclass(frozen=True)
class NodeBlock:
    index: int
    node_id: str
    lines: list[str]


def split_blocks(script_text: str) -> list[str]:
    """Split on ``===`` lines, dropping chunks that hold only whitespace."""
    return [chunk for chunk in NODE_END_PATTERN.split(script_text or "") if chunk.strip()]


def read_block(index: int, raw: str) -> NodeBlock | MalformedNodeBlock:
    """Separate a chunk into its title header and non-empty, trimmed body lines."""
    parts = SEPARATOR_PATTERN.split(raw, maxsplit=1)
    header = parts[0]

    node_id = None
    for header_line in header.splitlines():
        match = TITLE_PATTERN.match(header_line.strip())
        if match:
            node_id = match.group(1)
            break

    if node_id is None:
        return MalformedNodeBlock(block_index=index, reason="missing 'title:' header")
    if len(parts) < 2:
        return MalformedNodeBlock(block_index=index, reason=f"node {node_id!r} has no '---' separator")

    lines = [line.strip() for line in parts[1].splitlines()]
    return NodeBlock(index=index, node_id=node_id, lines=[line for line in lines if line])


def classify_line(line: str) -> ScriptLine:
    """Classify a single trimmed, non-empty body line."""
    if line.startswith(CHOICE_PREFIX):
        text = line[len(CHOICE_PREFIX):].strip()
        inline = INLINE_CHOICE_CONDITION.match(text)
        if inline:
            return ScriptLine(LineKind.CHOICE, line, text=inline.group(1), condition=inline.group(2))
        return ScriptLine(LineKind.CHOICE, line, text=text)

    if line.startswith("<<"):
        match = JUMP_PATTERN.fullmatch(line)
        if match:
            return ScriptLine(LineKind.JUMP, line, text=match.group(1))
        if SET_COMMAND_PATTERN.fullmatch(line):
            return ScriptLine(LineKind.SET, line, text=line)
        match = IF_PATTERN.fullmatch(line)
        if match:
            return ScriptLine(LineKind.IF, line, text=match.group(1))
        match = ELSEIF_PATTERN.fullmatch(line)
        if match:
            return ScriptLine(LineKind.ELSEIF, line, text=match.group(1))
        if ELSE_PATTERN.fullmatch(line):
            return ScriptLine(LineKind.ELSE, line)
        if ENDIF_PATTERN.fullmatch(line):
            return ScriptLine(LineKind.ENDIF, line)
        # unknown commands (<<wait 2>>, <<declare ...>>) ride along as content
        return ScriptLine(LineKind.CONTENT, line, text=line)

    speaker, colon, rest = line.partition(":")
    if colon and speaker.strip():
        return ScriptLine(LineKind.SPEAKER, line, text=rest.strip(), speaker=speaker.strip())
    return ScriptLine(LineKind.CONTENT, line, text=line)


def tokenize(lines: list[str]) -> list[ScriptLine]:
    return [classify_line(line) for line in lines]
