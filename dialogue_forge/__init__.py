"""Dialogue Forge - converts between dialogue trees and Yarn-style scripts."""

from dialogue_forge.core.converter import export_yarn, import_yarn
from dialogue_forge.core.diagnostics import ImportResult
from dialogue_forge.core.upgrade import upgrade_tree
from dialogue_forge.schemas.dialogue import DialogueTree

__all__ = ["DialogueTree", "ImportResult", "export_yarn", "import_yarn", "upgrade_tree"]
