"""Example catalog schemas."""

from pydantic import BaseModel

from dialogue_forge.schemas.dialogue import MODEL_CONFIG


class ExampleSummary(BaseModel):
    id: str
    title: str
    order: int
    description: str = ""
    node_count: int

    model_config = MODEL_CONFIG
