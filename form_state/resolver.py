"""Resolve any schema down to the field map it was derived from."""

import logging
from typing import Any

from form_state.record_schema import DerivedSchema, FieldMapSchema, as_record_schema

logger = logging.getLogger(__name__)


def resolve_field_map(
    schema: Any, _seen: frozenset[int] = frozenset()
) -> FieldMapSchema | None:
    """
    Find the field-map schema underneath any number of derivation layers.

    Args:
        schema: A field map, a derived schema, or a pydantic model class.

    Returns:
        FieldMapSchema | None: The underlying field map, or None when the
            schema is not record-shaped or its wrapping chain is cyclic.
    """
    schema = as_record_schema(schema)

    if isinstance(schema, FieldMapSchema):
        return schema

    if isinstance(schema, DerivedSchema):
        if id(schema) in _seen:
            logger.warning(f"Cyclic schema wrapping detected at {type(schema).__name__}")
            return None
        return resolve_field_map(schema.inner, _seen | {id(schema)})

    logger.warning(f"Schema of type {type(schema).__name__} has no field map")
    return None
