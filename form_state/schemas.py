"""Pydantic schemas for form configuration and validation outcomes."""

from typing import Any, Self

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from form_state.models import (
    DEFAULT_VALIDATION_MODE,
    ROOT_ERROR_KEY,
    ValidationMode,
    get_validation_mode,
)


class FormConfig(BaseModel):
    """Form configuration. Immutable after creation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    validation_mode: ValidationMode = Field(
        DEFAULT_VALIDATION_MODE,
        validation_alias=AliasChoices("validation_mode", "validationMode"),
        description="When field-level validation fires on user interaction.",
    )

    @field_validator("validation_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        """Accept mode names in any case."""
        if isinstance(v, str):
            return get_validation_mode(v)
        return v


class ValidationIssue(BaseModel):
    """A single validation failure: where it happened and what went wrong."""

    model_config = ConfigDict(frozen=True)

    path: tuple[str | int, ...] = Field(
        default=(), description="Location of the failure inside the record."
    )
    message: str = Field(..., description="Human-readable failure message.")
    code: str = Field(
        default="custom", description="Error type reported by pydantic, or custom."
    )

    @property
    def field(self) -> str:
        """Top-level field the issue belongs to."""
        if not self.path:
            return ROOT_ERROR_KEY
        return str(self.path[0])

    @property
    def aborts_refinement(self) -> bool:
        """True for missing or wrongly typed values, which refinements cannot inspect."""
        code = self.code
        return (
            code == "missing"
            or code.endswith(("_type", "_parsing"))
            or code in ("is_instance_of", "is_subclass_of")
        )


class ValidationOutcome(BaseModel):
    """Result of running a schema against a record.

    Falsy when invalid, so callers can write ``if not outcome:``.
    """

    success: bool
    value: Any = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: Any = None) -> Self:
        return cls(success=True, value=value)

    @classmethod
    def invalid(cls, issues: list[ValidationIssue]) -> Self:
        return cls(success=False, issues=issues)

    @property
    def messages(self) -> list[str]:
        """Issue messages in the order they were reported."""
        return [issue.message for issue in self.issues]

    def __bool__(self) -> bool:
        return self.success
