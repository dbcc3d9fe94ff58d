"""Record schemas: field maps and the derived schemas that wrap them.

A ``FieldMapSchema`` names each field of a record with its own pydantic field
definition. Refinements and transformations wrap an existing schema in a
``DerivedSchema`` that keeps a reference to the schema it wraps, so a chain
like::

    signup = (
        FieldMapSchema(
            name=Annotated[str, Field(min_length=3)],
            email=EmailStr,
            age=Annotated[int, Field(ge=18)],
        )
        .refine(lambda d: "admin" not in d["name"].lower(),
                "Name cannot contain 'admin'", path=("name",))
        .transform(lambda d: {**d, "full_name": f"{d['name']} Doe"})
    )

can always be unwrapped back to the field map it was built from.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError, create_model
from pydantic.fields import FieldInfo

from form_state.errors import ConfigurationError
from form_state.schemas import ValidationIssue, ValidationOutcome

logger = logging.getLogger(__name__)

DEFAULT_REFINE_MESSAGE = "Invalid input"


class RefinementContext:
    """Collects issues reported by a ``super_refine`` callback."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add_issue(self, message: str, path: Sequence[str | int] = ()) -> None:
        self.issues.append(ValidationIssue(path=tuple(path), message=message))


Refinement = Callable[[Any, RefinementContext], None]


def issues_from_error(exc: ValidationError) -> list[ValidationIssue]:
    """
    Convert a pydantic ``ValidationError`` into validation issues.

    Args:
        exc: The error raised by pydantic.

    Returns:
        list[ValidationIssue]: One issue per pydantic error, in order.
    """
    issues: list[ValidationIssue] = []
    for error in exc.errors():
        message = error["msg"]
        ctx = error.get("ctx") or {}
        # Drop pydantic's "Value error, " prefix for errors raised by validators
        if error["type"] == "value_error" and "error" in ctx:
            message = str(ctx["error"])
        issues.append(
            ValidationIssue(path=tuple(error["loc"]), message=message, code=error["type"])
        )
    return issues


class RecordSchema:
    """Base for every schema a form can be built from."""

    def safe_parse(self, record: Mapping[str, Any]) -> ValidationOutcome:
        """Validate ``record`` without raising for invalid data."""
        raise NotImplementedError

    @property
    def field_names(self) -> tuple[str, ...]:
        """Record keys declared by the field map underneath this schema."""
        raise NotImplementedError

    def refine(
        self,
        check: Callable[[Any], bool],
        message: str = DEFAULT_REFINE_MESSAGE,
        path: Sequence[str | int] = (),
    ) -> "RefinedSchema":
        """Reject values for which ``check`` returns False."""

        def _refinement(value: Any, ctx: RefinementContext) -> None:
            if not check(value):
                ctx.add_issue(message, path)

        return RefinedSchema(self, _refinement)

    def super_refine(self, refinement: Refinement) -> "RefinedSchema":
        """Run ``refinement(value, ctx)``; it reports problems via ``ctx.add_issue``."""
        return RefinedSchema(self, refinement)

    def transform(self, fn: Callable[[Any], Any]) -> "TransformedSchema":
        """Map a successfully validated value through ``fn``."""
        return TransformedSchema(self, fn)


def _field_definition(definition: Any) -> tuple[Any, Any]:
    """Normalize a field definition into the ``(annotation, default)`` pair create_model takes."""
    if isinstance(definition, tuple):
        if len(definition) != 2:
            raise TypeError(
                f"Field definition tuples must be (annotation, default), got {definition!r}"
            )
        return definition
    return (definition, ...)


def _input_key(name: str, info: FieldInfo) -> str:
    """The record key a model field is read from: its alias when it has one."""
    if isinstance(info.validation_alias, str):
        return info.validation_alias
    return info.alias or name


def _check_attribute_name(name: str) -> None:
    if not name.isidentifier() or name.startswith("_"):
        raise ConfigurationError(
            f"Field name '{name}' must be an identifier without a leading underscore"
        )
    if name.startswith("model_") and hasattr(BaseModel, name):
        raise ConfigurationError(
            f"Field name '{name}' clashes with pydantic BaseModel.{name}"
        )


class FieldMapSchema(RecordSchema):
    """A schema that enumerates named fields, each with its own definition.

    Field definitions are whatever ``pydantic.create_model`` accepts: a bare
    annotation (required field) or an ``(annotation, default)`` pair where the
    default may be a ``FieldInfo``. Field names are the record keys.

    Raises:
        ConfigurationError: If a field name cannot be a pydantic field.
    """

    def __init__(
        self,
        fields: Mapping[str, Any] | None = None,
        /,
        *,
        model_name: str = "Record",
        **extra_fields: Any,
    ) -> None:
        self.fields: dict[str, Any] = {**(fields or {}), **extra_fields}
        for name in self.fields:
            _check_attribute_name(name)
        self.model_name = model_name
        self._model: type[BaseModel] | None = None
        self._field_schemas: dict[str, FieldMapSchema] = {}
        # Record key to model attribute, for fields read through an alias
        self._attribute_names: dict[str, str] = {}

    @classmethod
    def from_model(cls, model: type[BaseModel]) -> "FieldMapSchema":
        """Build a field map from a pydantic model class.

        Fields are keyed by the name the model reads them from, i.e. the
        alias when one is set, so record keys, field names and error-map
        keys agree. Whole-record validation keeps using ``model`` itself,
        so its validators still run; single fields are validated from their
        annotation and ``FieldInfo`` alone.
        """
        schema = cls(model_name=model.__name__)
        for name, info in model.model_fields.items():
            key = _input_key(name, info)
            schema.fields[key] = (info.annotation, info)
            schema._attribute_names[key] = name
        schema._model = model
        return schema

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.fields)

    @property
    def model(self) -> type[BaseModel]:
        """The pydantic model backing this field map, built on first use."""
        if self._model is None:
            definitions = {
                self._attribute_names.get(key, key): _field_definition(definition)
                for key, definition in self.fields.items()
            }
            self._model = create_model(self.model_name, **definitions)
            logger.debug(
                f"Built model '{self.model_name}' with fields: {', '.join(definitions)}"
            )
        return self._model

    def pick(self, *names: str) -> "FieldMapSchema":
        """Return a field map holding only ``names``.

        Raises:
            KeyError: If a name is not declared.
        """
        picked = FieldMapSchema(model_name=self.model_name)
        for name in names:
            picked.fields[name] = self.fields[name]
            if name in self._attribute_names:
                picked._attribute_names[name] = self._attribute_names[name]
        return picked

    def field_schema(self, name: str) -> "FieldMapSchema":
        """Singleton field map for ``name``, built once and reused."""
        if name not in self._field_schemas:
            self._field_schemas[name] = self.pick(name)
        return self._field_schemas[name]

    def safe_parse(self, record: Mapping[str, Any]) -> ValidationOutcome:
        try:
            validated = self.model.model_validate(dict(record))
        except ValidationError as exc:
            return ValidationOutcome.invalid(issues_from_error(exc))
        return ValidationOutcome.ok(validated.model_dump(by_alias=True))

    def __repr__(self) -> str:
        return f"FieldMapSchema({', '.join(self.fields)})"


class DerivedSchema(RecordSchema):
    """A schema wrapping exactly one inner schema."""

    def __init__(self, inner: RecordSchema) -> None:
        self.inner = inner

    @property
    def field_names(self) -> tuple[str, ...]:
        return self.inner.field_names

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.inner!r})"


class RefinedSchema(DerivedSchema):
    """Adds checks on top of the inner schema.

    The refinement sees the validated value when the inner schema succeeds.
    When the inner schema failed only on constraints (lengths, bounds,
    formats, other refinements) it still runs, against the declared fields
    of the raw record, and its issues follow the inner ones. Missing or
    wrongly typed values skip it.
    """

    def __init__(self, inner: RecordSchema, refinement: Refinement) -> None:
        super().__init__(inner)
        self.refinement = refinement

    def safe_parse(self, record: Mapping[str, Any]) -> ValidationOutcome:
        outcome = self.inner.safe_parse(record)
        if outcome:
            value = outcome.value
        elif any(issue.aborts_refinement for issue in outcome.issues):
            return outcome
        else:
            declared = self.field_names
            value = {key: val for key, val in record.items() if key in declared}

        ctx = RefinementContext()
        self.refinement(value, ctx)
        if not outcome or ctx.issues:
            return ValidationOutcome.invalid([*outcome.issues, *ctx.issues])
        return outcome


class TransformedSchema(DerivedSchema):
    """Maps the inner schema's validated value through a function."""

    def __init__(self, inner: RecordSchema, fn: Callable[[Any], Any]) -> None:
        super().__init__(inner)
        self.fn = fn

    def safe_parse(self, record: Mapping[str, Any]) -> ValidationOutcome:
        outcome = self.inner.safe_parse(record)
        if not outcome:
            return outcome

        try:
            value = self.fn(outcome.value)
        except ValueError as exc:
            return ValidationOutcome.invalid([ValidationIssue(message=str(exc))])
        return ValidationOutcome.ok(value)


def as_record_schema(schema: Any) -> Any:
    """Wrap pydantic model classes as field maps; return anything else unchanged."""
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return FieldMapSchema.from_model(schema)
    return schema
