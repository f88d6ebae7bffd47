"""Render the helper script that imports generated files in dependency order."""
from typing import List

from setup_data.generators.writer import GeneratedFile, dataset_filename

IMPORT_SCRIPT_NAME = "import_all.py"


def render_import_script(entity_order: List[str]) -> str:
    """Generate import_all.py content.

    The script runs ``python -m setup_data import`` once per entity and stops
    at the first failing import.
    """
    entries = "\n".join(
        f'    ("{name}", "{dataset_filename(name)}"),' for name in entity_order
    )
    return f'''"""Import all generated entities in dependency order.

Run with: python import_all.py
"""
import subprocess
import sys
from pathlib import Path

HERE = Path(__file__).resolve().parent

ENTITIES = [
{entries}
]


def main() -> int:
    for name, filename in ENTITIES:
        print(f"Importing {{name}}...")
        command = [sys.executable, "-m", "setup_data", "import", "-f", str(HERE / filename), "-t", name]
        result = subprocess.run(command)
        if result.returncode != 0:
            print(f"Error importing {{name}} (exit code {{result.returncode}})", file=sys.stderr)
            return 1
    print("All entities imported successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
'''


def import_script_file(entity_order: List[str]) -> GeneratedFile:
    return GeneratedFile(path=IMPORT_SCRIPT_NAME, content=render_import_script(entity_order))
