"""Yarn endpoints - import scripts, export trees, upgrade imported trees."""

from fastapi import APIRouter

from dialogue_forge.core.diagnostics import ImportResult
from dialogue_forge.schemas.dialogue import DialogueTree
from dialogue_forge.schemas.yarn import ExportRequest, ExportResponse, ImportRequest, UpgradeRequest
from dialogue_forge.services.yarn_service import yarn_service

router = APIRouter()


@router.post("/import", response_model=ImportResult)
async def import_script(req: ImportRequest):
    """Parse a script into a tree. Problems come back as diagnostics, never as errors."""
    return yarn_service.import_script(req.script, req.title)


@router.post("/export", response_model=ExportResponse)
async def export_tree(req: ExportRequest):
    script = yarn_service.export_tree(req.tree)
    return ExportResponse(script=script, node_count=len(req.tree.nodes))


@router.post("/upgrade", response_model=DialogueTree)
async def upgrade_tree(req: UpgradeRequest):
    """Promote blocks-only npc nodes to conditional nodes."""
    return yarn_service.upgrade(req.tree)
