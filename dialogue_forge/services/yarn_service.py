"""Yarn service - import/export/upgrade with diagnostics reported to the log."""

import logging

from dialogue_forge.core.converter import export_yarn, import_yarn
from dialogue_forge.core.diagnostics import ImportResult
from dialogue_forge.core.upgrade import upgrade_tree
from dialogue_forge.schemas.dialogue import DialogueTree

logger = logging.getLogger(__name__)


class YarnService:
    def import_script(self, script_text: str, title: str | None = None) -> ImportResult:
        """Import a script; each diagnostic is logged as a warning."""
        result = import_yarn(script_text, title)
        for diagnostic in result.diagnostics:
            logger.warning("Import of %r: %s", result.tree.title, diagnostic.describe())
        logger.info(
            "Imported %r: %d node(s), %d diagnostic(s)",
            result.tree.title, len(result.tree.nodes), len(result.diagnostics),
        )
        return result

    def export_tree(self, tree: DialogueTree) -> str:
        script = export_yarn(tree)
        logger.info("Exported %r: %d node(s)", tree.title, len(tree.nodes))
        return script

    def upgrade(self, tree: DialogueTree) -> DialogueTree:
        return upgrade_tree(tree)


yarn_service = YarnService()
