"""Loading helpers for the form-state command line."""

import importlib
import json
import logging
from pathlib import Path
from typing import Any

from form_state.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_schema(reference: str) -> Any:
    """
    Import a schema object from a ``module:attribute`` reference.

    Args:
        reference: Dotted module path and attribute, e.g.
            ``"myapp.forms:signup_schema"``. Nested attributes
            (``"myapp.forms:Signup.schema"``) are followed.

    Returns:
        Any: The referenced object, unvalidated.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be imported.
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(
            f"Schema reference must look like 'module:attribute', got '{reference}'"
        )

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import schema module '{module_name}': {e}") from e

    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigurationError(
                f"Module '{module_name}' has no attribute '{attribute}'"
            ) from e

    logger.debug(f"Loaded schema {reference}")
    return target


def load_record(path: Path) -> dict[str, Any]:
    """
    Read a JSON object from ``path``.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or not an object.
    """
    try:
        payload = json.loads(path.read_text())
    except FileNotFoundError as e:
        raise ConfigurationError(f"Record file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Record file {path} is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ConfigurationError(
            f"Record file {path} must hold a JSON object, got {type(payload).__name__}"
        )
    return payload
