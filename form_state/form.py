"""Form state: current values, errors and dirty tracking for one record.

``FormState`` is a plain stateful object. Wrap it in whatever reactivity the
host application uses; derived values belong in the wrapper, for example::

    class SignupForm:
        def __init__(self) -> None:
            self.state = FormState(signup_schema, {"name": "John"})

        @property
        def can_submit(self) -> bool:
            return self.state.is_dirty and not self.state.errors
"""

import copy
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from form_state import dirty, validation
from form_state.errors import ConfigurationError, SchemaResolutionError
from form_state.models import ValidationMode
from form_state.record_schema import FieldMapSchema, RecordSchema, as_record_schema
from form_state.resolver import resolve_field_map
from form_state.schemas import FormConfig, ValidationOutcome

logger = logging.getLogger(__name__)


def build_config(config: FormConfig | Mapping[str, Any] | None = None) -> FormConfig:
    """
    Merge partial settings over the defaults.

    Args:
        config: A complete ``FormConfig``, a mapping of settings to override,
            or None for the defaults.

    Returns:
        FormConfig: The frozen configuration.

    Raises:
        ConfigurationError: If a setting is unknown or has an invalid value.
    """
    if isinstance(config, FormConfig):
        return config
    if not config:
        return FormConfig()
    # Unset settings fall back to the field defaults
    try:
        return FormConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid form configuration: {exc}") from exc


class FormState:
    """Tracks a record's values, validation errors and divergence from its baseline.

    Attributes:
        schema: The schema as given (possibly refined or transformed); used
            for whole-record validation.
        field_map: The field map underneath ``schema``; used for
            single-field validation.
        config: Frozen configuration, including the validation mode.
        data: Current field values. Mutate through the methods below.
        errors: Field name to error messages. A field with no entry is valid
            or not yet validated.
    """

    def __init__(
        self,
        schema: RecordSchema | Any,
        initial_data: Mapping[str, Any] | None = None,
        config: FormConfig | Mapping[str, Any] | None = None,
    ) -> None:
        schema = as_record_schema(schema)
        field_map = resolve_field_map(schema)
        if field_map is None:
            raise SchemaResolutionError(
                "Schema must be a field map, a pydantic model, or a derived schema "
                f"wrapping one; got {type(schema).__name__}"
            )

        self.schema: RecordSchema = schema
        self.field_map: FieldMapSchema = field_map
        self.config = build_config(config)
        self.data: dict[str, Any] = copy.deepcopy(dict(initial_data or {}))
        self.errors: validation.ErrorMap = {}
        self._initial_data: dict[str, Any] = copy.deepcopy(self.data)

        logger.debug(
            f"Created form over {field_map!r} "
            f"(validation mode: {self.config.validation_mode})"
        )

    @property
    def field_names(self) -> tuple[str, ...]:
        return self.field_map.field_names

    @property
    def initial_data(self) -> Mapping[str, Any]:
        """Read-only view of the dirty-tracking baseline."""
        return MappingProxyType(self._initial_data)

    @property
    def is_dirty(self) -> bool:
        return dirty.is_dirty(self.data, self._initial_data)

    def is_field_dirty(self, field: str) -> bool:
        return dirty.is_field_dirty(self.data, self._initial_data, field)

    def dirty_fields(self) -> list[str]:
        """Fields whose value differs from the baseline, current keys first."""
        names = list(self.data)
        names.extend(name for name in self._initial_data if name not in self.data)
        return [name for name in names if self.is_field_dirty(name)]

    def validate_outcome(self) -> ValidationOutcome:
        """
        Validate the whole record against the full schema.

        Rebuilds ``errors`` from scratch: on failure every failing field gets
        exactly the messages from this run, on success the map is emptied.

        Returns:
            ValidationOutcome: The full outcome, including the success flag.
        """
        outcome = validation.validate_all(self.schema, self.data)
        validation.replace_errors(self.errors, outcome)
        return outcome

    def validate(self) -> Any | None:
        """
        Validate the whole record and return its value, or None if invalid.

        A transform that returns None is indistinguishable from failure here;
        use ``validate_outcome`` when that matters.
        """
        outcome = self.validate_outcome()
        if not outcome:
            return None
        return outcome.value

    def validate_field(self, field: str) -> None:
        """
        Validate one field and update only that field's errors.

        Raises:
            UnknownFieldError: If the field is not declared in the schema.
        """
        outcome = validation.validate_field(self.field_map, self.data, field)
        validation.patch_field_errors(self.errors, field, outcome)

    def set_value(self, field: str, value: Any) -> None:
        """Write a value, then run the change handler for the field."""
        self.data[field] = value
        self.handle_change(field)

    def unset_value(self, field: str) -> None:
        """Remove a field's value. Errors are left as they are."""
        self.data.pop(field, None)

    def set_initial_values(self, values: Mapping[str, Any]) -> None:
        """Rebase the given fields: update both current values and the baseline."""
        for field, value in values.items():
            self.data[field] = value
            self._initial_data[field] = copy.deepcopy(value)

    def handle_blur(self, field: str) -> None:
        if self.config.validation_mode == ValidationMode.ON_BLUR:
            logger.debug(f"Validating '{field}' on blur")
            self.validate_field(field)

    def handle_change(self, field: str) -> None:
        if self.config.validation_mode == ValidationMode.ON_CHANGE:
            logger.debug(f"Validating '{field}' on change")
            self.validate_field(field)

    def set_error(self, field: str, message: str) -> None:
        """Append a message to a field's errors."""
        self.errors.setdefault(field, []).append(message)

    def clear_errors(self) -> None:
        self.errors.clear()

    def clear(self) -> None:
        """Remove every value and error; the baseline is kept."""
        for field in list(self.data):
            del self.data[field]
        self.clear_errors()

    def reset(self) -> None:
        """Restore values from the baseline and drop all errors."""
        for field in list(self.data):
            del self.data[field]
        self.data.update(copy.deepcopy(self._initial_data))
        self.clear_errors()

    def __repr__(self) -> str:
        return (
            f"FormState(fields={list(self.field_names)}, "
            f"dirty={self.is_dirty}, errors={sorted(self.errors)})"
        )
