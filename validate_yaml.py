#!/usr/bin/env python3
"""Validate record store YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import Draft7Validator

from fleet import config


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def format_path(path) -> str:
    return ".".join(str(p) for p in path) or "(document)"


def schema_errors(data, schema: dict) -> list[str]:
    """Every schema violation in the document, in document order."""
    validator = Draft7Validator(schema)
    errors = []
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
        errors.append(f"Schema validation error: {error.message}")
        errors.append(f"  at path: {format_path(error.path)}")
    return errors


def duplicate_ids(data: dict) -> list[str]:
    """Ids that occur more than once within a collection."""
    errors = []
    for collection, items in (data or {}).items():
        first_seen = {}
        for index, item in enumerate(items or []):
            record_id = item.get("_id") if isinstance(item, dict) else None
            if record_id is None:
                continue
            if record_id in first_seen:
                errors.append(
                    f"Duplicate _id {record_id!r} in {collection} "
                    f"(first at index {first_seen[record_id]})"
                )
                errors.append(f"  at path: {format_path([collection, index])}")
            else:
                first_seen[record_id] = index
    return errors


def validate_store_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single store YAML file. Returns list of errors."""
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    errors = schema_errors(data, schema)
    if errors:
        # Duplicate detection needs the collections to be lists of records
        return errors
    return duplicate_ids(data)


def main(argv=None):
    """Validate the given store files (default: FLEET_STORE_FILE)."""
    paths = [Path(p) for p in (argv if argv is not None else sys.argv[1:])]
    if not paths:
        paths = [Path(config.STORE_FILE)]

    schema = load_schema()
    all_valid = True
    for filepath in paths:
        errors = validate_store_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
