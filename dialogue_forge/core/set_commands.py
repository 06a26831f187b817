"""Helpers for ``<<set $var OP value>>`` commands.

Content strings and choice texts may carry set commands inline; the exporter
pulls them back out and prints them on their own lines.
"""

import re
from dataclasses import dataclass

from dialogue_forge.core.condition_codec import format_value, parse_value

SET_COMMAND_PATTERN = re.compile(r"<<set\s+\$(\w+)\s*([+\-*/%=]+|\bto\b)\s*(.+?)\s*>>")
# Same command plus the horizontal whitespace around it, for removal from prose
_EMBEDDED_SET_COMMAND = re.compile(r"[ \t]*" + SET_COMMAND_PATTERN.pattern + r"[ \t]*")


@dataclass(frozen=True)
class SetCommand:
    variable: str
    operator: str  # "=", "+=", "-=", "*=", "/=" ...
    value: str | bool | int | float

    @property
    def is_boolean_default(self) -> bool:
        """``<<set $x = true>>`` is what a bare entry in ``set_flags`` exports to."""
        return self.operator == "=" and self.value is True

    def format(self) -> str:
        return f"<<set ${self.variable} {self.operator} {format_value(self.value)}>>"


def parse_set_command(text: str) -> SetCommand | None:
    """Parse a whole ``<<set ...>>`` command; ``to`` is read as ``=``."""
    match = SET_COMMAND_PATTERN.fullmatch(text.strip())
    if not match:
        return None
    operator = "=" if match.group(2) == "to" else match.group(2)
    return SetCommand(variable=match.group(1), operator=operator, value=parse_value(match.group(3)))


def extract_set_commands(text: str) -> list[str]:
    """Return every set command embedded in ``text``, verbatim and in order."""
    if not text:
        return []
    return [match.group(0) for match in SET_COMMAND_PATTERN.finditer(text)]


def remove_set_commands(text: str) -> str:
    """Strip embedded set commands, dropping lines that held nothing else."""
    if not text:
        return ""
    stripped = _EMBEDDED_SET_COMMAND.sub(" ", text)
    lines = (line.strip() for line in stripped.splitlines())
    return "\n".join(line for line in lines if line)


def set_variables(commands: list[str]) -> list[str]:
    """Variable names targeted by the given commands."""
    variables = []
    for command in commands:
        parsed = parse_set_command(command)
        if parsed is not None:
            variables.append(parsed.variable)
    return variables


def format_set_command(variable: str, value: str | bool | int | float = True, operator: str = "=") -> str:
    return SetCommand(variable=variable, operator=operator, value=value).format()

