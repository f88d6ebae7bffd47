"""File writer for generated datasets."""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: str  # Relative path from output directory
    content: str  # File contents


def dataset_filename(entity_name: str) -> str:
    return f"{entity_name.lower()}-generated.json"


def dataset_file(entity_name: str, records: List[Any]) -> GeneratedFile:
    return GeneratedFile(path=dataset_filename(entity_name), content=json.dumps(records, indent=2) + "\n")


def write_files(files: List[GeneratedFile], out_dir: Path) -> List[Path]:
    """
    Write generated files to the output directory.

    Args:
        files: List of GeneratedFile objects to write
        out_dir: Base output directory path

    Returns:
        The paths written, in order
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for file in files:
        file_path = out_dir / file.path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(file.content, encoding="utf-8")
        written.append(file_path)
    return written
