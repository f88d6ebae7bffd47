"""Demo: generate a related mock dataset from a directory of entity classes.

Usage:
    python scripts/demo_generate_dataset.py [ENTITY_DIR] [--count N] [--seed S]

Defaults to the shop fixtures under tests/fixtures/entities/shop and writes
into a temporary directory, then prints the dependency order, a sample record
per entity and the generated import script.
"""
import argparse
import json
import sys
import tempfile
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from setup_data.core.logging import configure_logging
from setup_data.generators.dataset import generate_all
from setup_data.generators.import_script import IMPORT_SCRIPT_NAME
from setup_data.graph.builder import build_dependency_graph, build_entities
from setup_data.graph.toposort import resolve_dependency_order

DEFAULT_DIR = Path(__file__).parent.parent / "tests" / "fixtures" / "entities" / "shop"


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a demo mock dataset")
    parser.add_argument("directory", nargs="?", default=str(DEFAULT_DIR))
    parser.add_argument("--count", type=int, default=3)
    parser.add_argument("--seed", type=int, default=123)
    args = parser.parse_args()

    configure_logging("WARNING")

    entities = build_entities(args.directory)
    result = resolve_dependency_order(build_dependency_graph(entities))

    print("=" * 60)
    print("DEPENDENCY ORDER")
    print("=" * 60)
    for position, name in enumerate(result.order, 1):
        marker = " (cycle)" if name in result.cycle_members else ""
        print(f"{position}. {name}{marker}")
    for cycle in result.cycles:
        print(f"Cycle: {' -> '.join(cycle)}")

    with tempfile.TemporaryDirectory() as temp_dir:
        out_dir = Path(temp_dir)
        data = generate_all(entities, result.order, count=args.count, seed=args.seed, output_dir=out_dir)

        print("\n" + "=" * 60)
        print("SAMPLE RECORDS")
        print("=" * 60)
        for name, records in data.items():
            print(f"\n{name} ({len(records)} records):")
            print(json.dumps(records[0] if records else {}, indent=2))

        print("\n" + "=" * 60)
        print(f"FILES IN {out_dir}")
        print("=" * 60)
        for path in sorted(out_dir.iterdir()):
            print(f"  {path.name} ({path.stat().st_size} bytes)")

        print(f"\n{IMPORT_SCRIPT_NAME}:")
        print((out_dir / IMPORT_SCRIPT_NAME).read_text())

    return 0


if __name__ == "__main__":
    sys.exit(main())
