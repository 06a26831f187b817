"""Example service - loads the bundled example scripts listed in catalog.yaml.

Each example is imported once and the ImportResult is cached for the life of
the process.
"""

from pathlib import Path

import yaml

from dialogue_forge.core.diagnostics import ImportResult
from dialogue_forge.services.yarn_service import yarn_service

DATA_DIR = Path(__file__).parent.parent / "data" / "examples"
CATALOG_FILE = "catalog.yaml"


class ExampleService:
    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = data_dir
        self._cache: dict[str, ImportResult] = {}

    def _read_catalog(self) -> list[dict]:
        with open(self.data_dir / CATALOG_FILE, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return raw.get("examples", [])

    def get_entry(self, example_id: str) -> dict:
        """Catalog entry for one example. Raises FileNotFoundError if it is not listed."""
        for entry in self._read_catalog():
            if entry["id"] == example_id:
                return entry
        raise FileNotFoundError(f"Example not found: {example_id}")

    def load_example(self, example_id: str) -> ImportResult:
        """Import an example script by id."""
        if example_id in self._cache:
            return self._cache[example_id]

        entry = self.get_entry(example_id)
        result = yarn_service.import_script(self.load_script(example_id), title=entry["title"])
        self._cache[example_id] = result
        return result

    def load_script(self, example_id: str) -> str:
        """Raw script text of an example."""
        entry = self.get_entry(example_id)
        file_path = self.data_dir / entry["file"]
        if not file_path.exists():
            raise FileNotFoundError(f"Example file not found: {file_path}")
        return file_path.read_text(encoding="utf-8")

    def list_examples(self) -> list[dict]:
        """List all examples with basic info, sorted by order."""
        examples = []
        for entry in self._read_catalog():
            examples.append({
                "id": entry["id"],
                "title": entry["title"],
                "order": entry["order"],
                "description": entry.get("description", ""),
                "node_count": len(self.load_example(entry["id"]).tree.nodes),
            })
        return sorted(examples, key=lambda x: x["order"])


example_service = ExampleService()
