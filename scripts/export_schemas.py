"""Export JSON schemas for the LLM output contracts and the public models."""

import json
from pathlib import Path
from typing import Any

from backend.app.llm.schemas import CATEGORY_TREE_SCHEMA, QUESTION_LIST_SCHEMA
from backend.app.models import Document, GenerationReport, MenuCatalog


def _write(path: Path, schema: dict[str, Any]) -> None:
    with open(path, "w") as f:
        json.dump(schema, f, indent=2)
    print(f"Exported {path.stem} to {path}")


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    _write(schemas_dir / "CategoryTreeOutput.schema.json", CATEGORY_TREE_SCHEMA)
    _write(schemas_dir / "QuestionListOutput.schema.json", QUESTION_LIST_SCHEMA)

    for model in (Document, MenuCatalog, GenerationReport):
        _write(schemas_dir / f"{model.__name__}.schema.json", model.model_json_schema())


if __name__ == "__main__":
    main()
