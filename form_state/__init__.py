from form_state.errors import (
    ConfigurationError,
    FormStateError,
    SchemaResolutionError,
    UnknownFieldError,
)
from form_state.form import FormState
from form_state.models import ROOT_ERROR_KEY, ValidationMode
from form_state.record_schema import (
    DerivedSchema,
    FieldMapSchema,
    RecordSchema,
    RefinedSchema,
    RefinementContext,
    TransformedSchema,
)
from form_state.resolver import resolve_field_map
from form_state.schemas import FormConfig, ValidationIssue, ValidationOutcome

__all__ = [
    "ConfigurationError",
    "DerivedSchema",
    "FieldMapSchema",
    "FormConfig",
    "FormState",
    "FormStateError",
    "ROOT_ERROR_KEY",
    "RecordSchema",
    "RefinedSchema",
    "RefinementContext",
    "SchemaResolutionError",
    "TransformedSchema",
    "UnknownFieldError",
    "ValidationIssue",
    "ValidationMode",
    "ValidationOutcome",
    "resolve_field_map",
]
