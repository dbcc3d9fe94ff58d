"""Exception hierarchy for form state.

Validation failures are never raised; they live in the error map. These
types cover programmer errors only: a schema that cannot back a form, bad
configuration, and schema-dependent calls on undeclared fields.
"""


class FormStateError(Exception):
    """Base for all form-state errors."""


class ConfigurationError(FormStateError, ValueError):
    """Raised when form configuration is invalid."""


class SchemaResolutionError(ConfigurationError):
    """Raised when a schema does not resolve to a field map.

    Covers plain non-record schemas as well as derived schemas whose
    wrapping chain is cyclic or ends in something other than a field map.
    """


class UnknownFieldError(FormStateError, KeyError):
    """Raised when a field is not declared in the resolved field map."""

    def __init__(self, field: str, declared: tuple[str, ...] = ()) -> None:
        self.field = field
        self.declared = declared
        super().__init__(field)

    def __str__(self) -> str:
        if self.declared:
            return f"Unknown field '{self.field}', declared fields: {', '.join(self.declared)}"
        return f"Unknown field '{self.field}'"
