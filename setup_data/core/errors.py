"""Exception types raised by setup-data."""


class SetupDataError(Exception):
    """Base class for all setup-data failures."""


class SchemaError(SetupDataError):
    """A schema source could not be turned into an entity definition.

    Raised for unsupported file extensions, sources without any class or
    interface declaration, and missing or unreadable input paths.
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class GeneratorOverrideError(SetupDataError):
    """A per-field generator override does not resolve to a callable."""

    def __init__(self, field_name: str, override: str, reason: str):
        super().__init__(f"Invalid generator override '{override}' for field '{field_name}': {reason}")
        self.field_name = field_name
        self.override = override


class ValidationFailedError(SetupDataError):
    """Records did not match the schema they were checked against."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class DataImportError(SetupDataError):
    """Records could not be written to the configured target."""
