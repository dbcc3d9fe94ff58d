from enum import StrEnum


class ValidationMode(StrEnum):
    ON_SUBMIT = "onSubmit"
    ON_BLUR = "onBlur"
    ON_CHANGE = "onChange"


# Error-map key for issues that carry no field path.
ROOT_ERROR_KEY = "__root__"

DEFAULT_VALIDATION_MODE = ValidationMode.ON_SUBMIT


def get_validation_mode(value: str | ValidationMode) -> ValidationMode:
    """
    Get the validation mode for a given name.

    Args:
        value: Mode value, e.g. "onBlur". Matching ignores case and
            underscores, so "ON_BLUR" works too.

    Returns:
        ValidationMode enum value.

    Raises:
        ValueError: If the name matches no mode.
    """
    if isinstance(value, ValidationMode):
        return value

    # Check exact match first
    try:
        return ValidationMode(value)
    except ValueError:
        pass

    lowered = value.lower().replace("_", "")
    for mode in ValidationMode:
        if mode.value.lower() == lowered:
            return mode

    options = ", ".join(mode.value for mode in ValidationMode)
    raise ValueError(f"Unknown validation mode '{value}', expected one of {options}")
