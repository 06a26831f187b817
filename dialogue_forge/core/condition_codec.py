"""Condition codec - converts between condition text and ``list[Condition]``.

Understands the clause forms written by the editor and by hand:

- ``$flag``                      -> is_set
- ``not $flag`` / ``!$flag``     -> is_not_set
- ``$flag == value`` (``!=``, ``>=``, ``<=``, ``>``, ``<`` and the word
  forms ``eq``/``is``, ``neq``, ``gte``, ``lte``, ``gt``, ``lt``)
- ``value < $flag``              -> the mirrored comparison (``$flag > value``)

Clauses are joined with ``and`` or ``&&``. Conditions are only parsed and
printed here, never evaluated.
"""

import logging
import re

from dialogue_forge.schemas.dialogue import Condition, ConditionOperator

logger = logging.getLogger(__name__)

# "and" / "&&" that is not inside a double-quoted string
CLAUSE_SEPARATOR = re.compile(
    r'(?:\s+and\s+|\s*&&\s*)(?=(?:[^"]*"[^"]*")*[^"]*$)', re.IGNORECASE
)

NOT_FLAG_PATTERN = re.compile(r"(?:not\s+|!\s*)\$(\w+)", re.IGNORECASE)
COMPARISON_PATTERN = re.compile(r"\$(\w+)\s*(==|!=|>=|<=|>|<)\s*(.+)")
WORD_COMPARISON_PATTERN = re.compile(r"\$(\w+)\s+(eq|is|neq|gte|lte|gt|lt)\s+(.+)", re.IGNORECASE)
REVERSED_COMPARISON_PATTERN = re.compile(r"([^$\s][^$]*?)\s*(==|!=|>=|<=|>|<)\s*\$(\w+)")
FLAG_PATTERN = re.compile(r"\$(\w+)")

INT_LITERAL = re.compile(r"[+-]?\d+")
FLOAT_LITERAL = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?")

OPERATOR_BY_SYMBOL = {
    "==": ConditionOperator.EQUALS,
    "!=": ConditionOperator.NOT_EQUALS,
    ">=": ConditionOperator.GREATER_EQUAL,
    "<=": ConditionOperator.LESS_EQUAL,
    ">": ConditionOperator.GREATER_THAN,
    "<": ConditionOperator.LESS_THAN,
}

OPERATOR_BY_WORD = {
    "eq": ConditionOperator.EQUALS,
    "is": ConditionOperator.EQUALS,
    "neq": ConditionOperator.NOT_EQUALS,
    "gte": ConditionOperator.GREATER_EQUAL,
    "lte": ConditionOperator.LESS_EQUAL,
    "gt": ConditionOperator.GREATER_THAN,
    "lt": ConditionOperator.LESS_THAN,
}

SYMBOL_BY_OPERATOR = {op: symbol for symbol, op in OPERATOR_BY_SYMBOL.items()}

# "5 < $gold" is "$gold > 5"
MIRRORED_OPERATOR = {
    ConditionOperator.EQUALS: ConditionOperator.EQUALS,
    ConditionOperator.NOT_EQUALS: ConditionOperator.NOT_EQUALS,
    ConditionOperator.GREATER_THAN: ConditionOperator.LESS_THAN,
    ConditionOperator.LESS_THAN: ConditionOperator.GREATER_THAN,
    ConditionOperator.GREATER_EQUAL: ConditionOperator.LESS_EQUAL,
    ConditionOperator.LESS_EQUAL: ConditionOperator.GREATER_EQUAL,
}


def parse_value(text: str) -> str | bool | int | float:
    """Quoted text stays a string; bare literals become bool, int or float when they look like one."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    if text == "true":
        return True
    if text == "false":
        return False
    if INT_LITERAL.fullmatch(text):
        return int(text)
    if FLOAT_LITERAL.fullmatch(text):
        return float(text)
    return text


def format_value(value: str | bool | int | float) -> str:
    # bool first: True is also an int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return f'"{value}"'


def parse_clause(clause: str) -> Condition | None:
    """Parse one clause, or return None when it matches no known form."""
    match = NOT_FLAG_PATTERN.fullmatch(clause)
    if match:
        return Condition(flag=match.group(1), operator=ConditionOperator.IS_NOT_SET)

    match = COMPARISON_PATTERN.fullmatch(clause)
    if match:
        return Condition(
            flag=match.group(1),
            operator=OPERATOR_BY_SYMBOL[match.group(2)],
            value=parse_value(match.group(3)),
        )

    match = WORD_COMPARISON_PATTERN.fullmatch(clause)
    if match:
        return Condition(
            flag=match.group(1),
            operator=OPERATOR_BY_WORD[match.group(2).lower()],
            value=parse_value(match.group(3)),
        )

    match = REVERSED_COMPARISON_PATTERN.fullmatch(clause)
    if match:
        return Condition(
            flag=match.group(3),
            operator=MIRRORED_OPERATOR[OPERATOR_BY_SYMBOL[match.group(2)]],
            value=parse_value(match.group(1)),
        )

    match = FLAG_PATTERN.fullmatch(clause)
    if match:
        return Condition(flag=match.group(1), operator=ConditionOperator.IS_SET)

    return None


def parse_condition_clauses(text: str) -> tuple[list[Condition], list[str]]:
    """Parse a condition and also return the raw clauses that were not understood."""
    conditions: list[Condition] = []
    rejected: list[str] = []

    for part in CLAUSE_SEPARATOR.split(text.strip()):
        part = part.strip()
        # empty pieces and the always-true literal contribute nothing
        if not part or part == "true":
            continue
        condition = parse_clause(part)
        if condition is None:
            rejected.append(part)
        else:
            conditions.append(condition)

    return conditions, rejected


def parse_condition(text: str) -> list[Condition]:
    """Parse condition text such as ``$quest and $gold >= 100``."""
    conditions, rejected = parse_condition_clauses(text)
    for clause in rejected:
        logger.debug("Dropping unrecognized condition clause %r", clause)
    return conditions


def format_clause(condition: Condition) -> str:
    flag = f"${condition.flag}"
    if condition.operator is ConditionOperator.IS_SET:
        return flag
    if condition.operator is ConditionOperator.IS_NOT_SET:
        return f"not {flag}"
    if condition.value is None:
        # comparison still being edited: keep the flag so the guard survives
        return flag
    return f"{flag} {SYMBOL_BY_OPERATOR[condition.operator]} {format_value(condition.value)}"


def format_condition(conditions: list[Condition] | None) -> str:
    """Inverse of ``parse_condition``: ``[is_set quest, gold >= 100]`` -> ``$quest and $gold >= 100``."""
    return " and ".join(format_clause(condition) for condition in conditions or [])


NEGATED_OPERATOR = {
    ConditionOperator.IS_SET: ConditionOperator.IS_NOT_SET,
    ConditionOperator.IS_NOT_SET: ConditionOperator.IS_SET,
    ConditionOperator.EQUALS: ConditionOperator.NOT_EQUALS,
    ConditionOperator.NOT_EQUALS: ConditionOperator.EQUALS,
    ConditionOperator.GREATER_THAN: ConditionOperator.LESS_EQUAL,
    ConditionOperator.LESS_EQUAL: ConditionOperator.GREATER_THAN,
    ConditionOperator.LESS_THAN: ConditionOperator.GREATER_EQUAL,
    ConditionOperator.GREATER_EQUAL: ConditionOperator.LESS_THAN,
}


def negate_condition(condition: Condition) -> Condition:
    """``$gold >= 5`` -> ``$gold < 5``. Only single clauses can be negated without an ``or``."""
    return condition.model_copy(update={"operator": NEGATED_OPERATOR[condition.operator]})
