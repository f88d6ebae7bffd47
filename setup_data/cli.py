"""Command line interface: ``setup-data`` or ``python -m setup_data``."""
import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict, List, Optional

from setup_data.core.config import Settings, load_config, render_example_config
from setup_data.core.errors import SetupDataError, ValidationFailedError
from setup_data.core.logging import configure_logging
from setup_data.core.workflow import Stage
from setup_data.generators.dataset import GenerationOptions, generate_entities_from_directory
from setup_data.generators.mock import generate_mock_data
from setup_data.importers.service import import_data, load_records
from setup_data.schema.validator import validate_file
from setup_data.transformers.casing import CASE_STYLES, transform_data

log = logging.getLogger("setup_data.cli")

try:
    __version__ = version("setup-data")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"


def _parse_assignment(text: str) -> tuple:
    """``IsActive=true`` -> ``("IsActive", True)``; values are parsed as JSON when possible."""
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{text}'")
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    return key, value


def _write_json(path: str | Path, data: Any) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def cmd_init(args: argparse.Namespace) -> int:
    target = Path(args.path)
    if target.exists():
        log.error(f"Configuration file already exists at {target.resolve()}")
        return 1
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_example_config(), encoding="utf-8")
    log.info(f"Configuration file created at {target.resolve()}")
    log.info("Edit this file to configure your database connection and other settings.")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    log.info(f"Importing data from {args.file} to {args.table}...", extra={"stage": Stage.IMPORT, "entity": args.table})
    data = load_records(args.file)

    if args.schema:
        log.info(f"Validating data against schema {args.schema}...", extra={"stage": Stage.VALIDATE})
        if not validate_file(data, args.schema, args.table):
            raise ValidationFailedError("Data validation failed against the provided schema")
        log.info("Data validation successful", extra={"stage": Stage.VALIDATE})

    overrides: Dict[str, Any] = dict(args.set or [])
    if args.override_category is not None:
        overrides["CategoryId"] = args.override_category

    result = import_data(data, args.table, config, index=args.index, overrides=overrides)
    return 0 if result.ok else 1


def cmd_convert(args: argparse.Namespace) -> int:
    log.info(f"Converting {args.file} to {args.case} case...", extra={"stage": Stage.TRANSFORM})
    data = load_records(args.file)
    path = _write_json(args.output, transform_data(data, args.case))
    log.info(f"Converted data saved to {path}", extra={"stage": Stage.TRANSFORM})
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    log.info(f"Validating data in {args.file} against schema {args.schema}...", extra={"stage": Stage.VALIDATE})
    data = load_records(args.file)
    if validate_file(data, args.schema, args.table):
        log.info("Validation successful! The data matches the schema.", extra={"stage": Stage.VALIDATE})
        return 0
    log.error("Validation failed! The data does not match the schema.", extra={"stage": Stage.VALIDATE})
    return 1


def _options(args: argparse.Namespace):
    config = load_config(args.config)
    generation = config.generation
    count = args.count if args.count is not None else generation.count
    seed = args.seed if args.seed is not None else generation.seed
    return generation, count, seed, GenerationOptions.from_config(generation)


def cmd_generate(args: argparse.Namespace) -> int:
    _, count, seed, options = _options(args)
    records = generate_mock_data(args.schema, count=count, table_name=args.table, seed=seed, options=options)
    path = _write_json(args.output, records)
    log.info(f"Saved {len(records)} records to {path}", extra={"stage": Stage.WRITE})
    return 0


def cmd_generate_entities(args: argparse.Namespace) -> int:
    generation, count, seed, options = _options(args)
    output = args.output or generation.output_dir
    options.retain_records = False
    generated = generate_entities_from_directory(args.directory, output, count=count, seed=seed, options=options)
    log.info(f"Generated data for {len(generated)} entities in {output}", extra={"stage": Stage.WRITE})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="setup-data",
        description="A tool for populating database tables with real or mock data",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Logging level (default: SETUP_DATA_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", metavar="command")

    p = sub.add_parser("init", help="Create a new configuration file")
    p.add_argument("-p", "--path", default="./setup-data.yml", help="Path to create the configuration file")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("import", help="Import data from a JSON file to a database table or API endpoint")
    p.add_argument("-f", "--file", required=True, help="Path to the JSON file containing the data")
    p.add_argument("-t", "--table", required=True, help="Name of the table or entity to import data into")
    p.add_argument("-s", "--schema", help="Path to the schema file (C#, TypeScript, or JSON)")
    p.add_argument("-c", "--config", help="Path to the configuration file (default: ./setup-data.yml)")
    p.add_argument("-i", "--index", type=int, help="Import only the item at the specified index")
    p.add_argument("--override-category", type=int, help="Override all CategoryId values with the specified ID")
    p.add_argument("--set", type=_parse_assignment, action="append", metavar="KEY=VALUE",
                   help="Override a field on every imported item (repeatable)")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("convert", help="Convert property names in a JSON file to a different case style")
    p.add_argument("-f", "--file", required=True, help="Path to the JSON file to convert")
    p.add_argument("-o", "--output", required=True, help="Path to save the converted JSON file")
    p.add_argument("-c", "--case", required=True, choices=CASE_STYLES, help="Case style to convert to")
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser("validate", help="Validate data against a schema without importing")
    p.add_argument("-f", "--file", required=True, help="Path to the JSON file containing the data")
    p.add_argument("-s", "--schema", required=True, help="Path to the schema file (C#, TypeScript, or JSON)")
    p.add_argument("-t", "--table", help="Definition to use inside a multi-schema JSON document")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("generate", help="Generate mock data for a single schema")
    p.add_argument("-s", "--schema", required=True, help="Path to the schema file (C#, TypeScript, or JSON)")
    p.add_argument("-o", "--output", required=True, help="Path to save the generated JSON file")
    p.add_argument("-t", "--table", help="Definition to use inside a multi-schema JSON document")
    p.add_argument("-n", "--count", type=int, help="Number of records (default: generation.count)")
    p.add_argument("--seed", type=int, help="Random seed (default: generation.seed)")
    p.add_argument("-c", "--config", help="Path to the configuration file")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("generate-entities", help="Generate related mock data for a directory of entity classes")
    p.add_argument("-d", "--directory", required=True, help="Directory containing entity class files")
    p.add_argument("-o", "--output", help="Output directory (default: generation.outputDir)")
    p.add_argument("-n", "--count", type=int, help="Records per entity (default: generation.count)")
    p.add_argument("--seed", type=int, help="Random seed (default: generation.seed)")
    p.add_argument("-c", "--config", help="Path to the configuration file")
    p.set_defaults(func=cmd_generate_entities)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or Settings().log_level)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (SetupDataError, OSError) as e:
        log.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
