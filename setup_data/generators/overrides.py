"""Per-field generator overrides expressed as Faker method paths."""
from typing import Callable

from faker import Faker

from setup_data.core.errors import GeneratorOverrideError


def resolve_override(faker: Faker, path: str, field_name: str) -> Callable[[], object]:
    """Resolve a dotted method path such as ``email`` or ``internet.email``.

    The path is first walked attribute by attribute. Faker exposes its
    providers as flat methods, so a namespaced path falls back to its last
    segment.
    """
    parts = [p for p in path.strip().split(".") if p]
    if not parts:
        raise GeneratorOverrideError(field_name, path, "empty method path")

    target = _walk(faker, parts)
    if target is None and len(parts) > 1:
        target = _walk(faker, parts[-1:])
    if target is None:
        raise GeneratorOverrideError(field_name, path, "no such Faker method")
    if not callable(target):
        raise GeneratorOverrideError(field_name, path, "not callable")
    return target


def _walk(obj, parts):
    current = obj
    for part in parts:
        if part.startswith("_"):
            return None
        try:
            current = getattr(current, part)
        except AttributeError:
            return None
    return current


def generate_override(faker: Faker, path: str, field_name: str) -> object:
    """Resolve an override and call it with no arguments."""
    method = resolve_override(faker, path, field_name)
    try:
        return method()
    except TypeError as e:
        raise GeneratorOverrideError(field_name, path, f"cannot be called without arguments ({e})") from e
