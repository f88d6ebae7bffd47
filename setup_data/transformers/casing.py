"""Rewrite record keys to a different case style."""
import re
from typing import Any, Callable, Dict, Optional

CASE_STYLES = ("pascal", "camel", "snake", "kebab")


def _split_id(name: str) -> Optional[str]:
    """Return the prefix of a key ending in ``id`` (any case), else None."""
    if name.lower().endswith("id"):
        return name[:-2].rstrip("_- ")
    return None


def to_pascal_case(name: str) -> str:
    """Convert snake_case, kebab-case or camelCase to PascalCase.

    Keys ending in ``id`` keep a literal ``Id`` suffix: ``user_id`` -> ``UserId``.
    """
    prefix = _split_id(name)
    if prefix is not None:
        return to_pascal_case(prefix) + "Id"
    # Capitalize the character after each separator, then the first one
    s1 = re.sub(r"[-_\s]+(\w)", lambda m: m.group(1).upper(), name)
    s1 = re.sub(r"[-_\s]+$", "", s1)
    return s1[:1].upper() + s1[1:]


def to_camel_case(name: str) -> str:
    """Convert to camelCase. A bare ``id`` stays ``id``."""
    prefix = _split_id(name)
    if prefix is not None:
        if not prefix:
            return "id"
        return to_camel_case(prefix) + "Id"
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def _separated(name: str, separator: str) -> str:
    s1 = re.sub(r"([A-Z])", separator + r"\1", name).lower()
    s2 = re.sub(r"[-_\s]+", separator, s1)
    return s2.strip(separator)


def to_snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    return _separated(name, "_")


def to_kebab_case(name: str) -> str:
    """Convert PascalCase or camelCase to kebab-case."""
    return _separated(name, "-")


CONVERTERS: Dict[str, Callable[[str], str]] = {
    "pascal": to_pascal_case,
    "camel": to_camel_case,
    "snake": to_snake_case,
    "kebab": to_kebab_case,
}


def convert_key(name: str, style: Optional[str]) -> str:
    converter = CONVERTERS.get((style or "").lower())
    return converter(name) if converter else name


def transform_case(value: Any, style: Optional[str]) -> Any:
    """Recursively re-key mappings, including mappings inside lists. Scalars are untouched."""
    if isinstance(value, dict):
        return {convert_key(str(k), style): transform_case(v, style) for k, v in value.items()}
    if isinstance(value, list):
        return [transform_case(item, style) for item in value]
    return value


def transform_data(data: Any, casing: Optional[str] = None) -> Any:
    """Apply the configured casing to one record or a list of records."""
    if not casing:
        return data
    return transform_case(data, casing)
