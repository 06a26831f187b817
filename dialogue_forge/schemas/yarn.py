"""Request/response schemas for the yarn conversion endpoints."""

from pydantic import BaseModel

from dialogue_forge.schemas.dialogue import MODEL_CONFIG, DialogueTree


class ImportRequest(BaseModel):
    script: str
    title: str | None = None  # falls back to settings.DEFAULT_IMPORT_TITLE

    model_config = MODEL_CONFIG


class ExportRequest(BaseModel):
    tree: DialogueTree

    model_config = MODEL_CONFIG


class ExportResponse(BaseModel):
    script: str
    node_count: int

    model_config = MODEL_CONFIG


class UpgradeRequest(BaseModel):
    tree: DialogueTree

    model_config = MODEL_CONFIG
