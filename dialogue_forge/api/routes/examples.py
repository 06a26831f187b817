"""Example endpoints - list bundled example scripts and load them as trees."""

from fastapi import APIRouter, HTTPException

from dialogue_forge.core.diagnostics import ImportResult
from dialogue_forge.schemas.example import ExampleSummary
from dialogue_forge.services.example_service import example_service

router = APIRouter()


@router.get("/", response_model=list[ExampleSummary])
async def list_examples():
    """List all bundled examples in display order."""
    return [ExampleSummary(**example) for example in example_service.list_examples()]


@router.get("/{example_id}", response_model=ImportResult)
async def get_example(example_id: str):
    """Load one example as an imported tree."""
    try:
        return example_service.load_example(example_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Example not found")
