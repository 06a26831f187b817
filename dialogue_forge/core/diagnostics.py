"""Import diagnostics - everything the parser recovered from instead of failing on.

Parsing a script is best effort: malformed pieces are skipped, and each skip is
reported here so callers can surface it in the editor.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from dialogue_forge.schemas.dialogue import MODEL_CONFIG, ImportedDialogueTree


class MalformedNodeBlock(BaseModel):
    """A ``===``-delimited block without a ``title:`` header or ``---`` separator."""
    kind: Literal["malformed_node_block"] = "malformed_node_block"
    block_index: int
    reason: str

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return f"block {self.block_index} skipped: {self.reason}"


class UnrecognizedConditionClause(BaseModel):
    kind: Literal["unrecognized_condition_clause"] = "unrecognized_condition_clause"
    node_id: str
    raw_clause: str

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return f"node {self.node_id}: condition clause {self.raw_clause!r} not understood"


class EmptyDocument(BaseModel):
    kind: Literal["empty_document"] = "empty_document"

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return "script contains no node blocks"


class DuplicateNodeId(BaseModel):
    """A later block reused an existing title; the first node wins."""
    kind: Literal["duplicate_node_id"] = "duplicate_node_id"
    block_index: int
    node_id: str

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return f"block {self.block_index} skipped: node id {self.node_id!r} already defined"


class UnexpectedDirective(BaseModel):
    """A control directive that does not fit the open if/elseif/else chain."""
    kind: Literal["unexpected_directive"] = "unexpected_directive"
    node_id: str
    line: str
    reason: str

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return f"node {self.node_id}: {self.line!r} {self.reason}"


class UnterminatedConditional(BaseModel):
    kind: Literal["unterminated_conditional"] = "unterminated_conditional"
    node_id: str

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return f"node {self.node_id}: <<if>> without a closing <<endif>>"


class DanglingChoiceGuard(BaseModel):
    """An ``<<if>>`` read as a choice guard that closed before any ``->`` choice."""
    kind: Literal["dangling_choice_guard"] = "dangling_choice_guard"
    node_id: str
    condition: str

    model_config = MODEL_CONFIG

    def describe(self) -> str:
        return f"node {self.node_id}: choice guard <<if {self.condition}>> guards no choice"


Diagnostic = Annotated[
    Union[
        MalformedNodeBlock,
        UnrecognizedConditionClause,
        EmptyDocument,
        DuplicateNodeId,
        UnexpectedDirective,
        UnterminatedConditional,
        DanglingChoiceGuard,
    ],
    Field(discriminator="kind"),
]


class ImportResult(BaseModel):
    """Best-effort tree plus every diagnostic collected while building it."""
    tree: ImportedDialogueTree
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    model_config = MODEL_CONFIG

    @property
    def is_empty(self) -> bool:
        return any(isinstance(d, EmptyDocument) for d in self.diagnostics)

    @property
    def ok(self) -> bool:
        return not self.diagnostics
