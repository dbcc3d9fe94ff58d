"""Whole-record and single-field validation, normalized into error maps."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from form_state.errors import UnknownFieldError
from form_state.record_schema import FieldMapSchema, RecordSchema
from form_state.schemas import ValidationIssue, ValidationOutcome

logger = logging.getLogger(__name__)

ErrorMap = dict[str, list[str]]


def build_error_map(issues: Iterable[ValidationIssue]) -> ErrorMap:
    """
    Bucket issues under the top-level field they belong to.

    Nested paths (``("address", "city")``) bucket to their first segment;
    issues without a path go under ``ROOT_ERROR_KEY``. Message order follows
    issue order.

    Args:
        issues: Issues reported by a schema.

    Returns:
        ErrorMap: Field name to messages, with no empty lists.
    """
    errors: ErrorMap = {}
    for issue in issues:
        errors.setdefault(issue.field, []).append(issue.message)
    return errors


def validate_all(schema: RecordSchema, record: Mapping[str, Any]) -> ValidationOutcome:
    """
    Run the full, possibly derived schema against the whole record.

    Refinements and transforms apply here, so a successful outcome's value
    may differ in shape from ``record``.
    """
    outcome = schema.safe_parse(record)
    if outcome:
        logger.debug("Record validated successfully")
    else:
        logger.debug(f"Record failed validation with {len(outcome.issues)} issue(s)")
    return outcome


def validate_field(
    field_map: FieldMapSchema, record: Mapping[str, Any], field: str
) -> ValidationOutcome:
    """
    Validate one field against its own sub-schema only.

    Cross-field refinements and transforms are never consulted. A field
    missing from ``record`` is validated as absent, so required fields
    report a missing-value error.

    Raises:
        UnknownFieldError: If ``field`` is not declared in ``field_map``.
    """
    if field not in field_map.fields:
        raise UnknownFieldError(field, field_map.field_names)

    single = field_map.field_schema(field)
    payload = {field: record[field]} if field in record else {}
    outcome = single.safe_parse(payload)
    if not outcome:
        logger.debug(f"Field '{field}' failed validation: {outcome.messages}")
    return outcome


def replace_errors(errors: ErrorMap, outcome: ValidationOutcome) -> None:
    """Discard every existing entry and rebuild ``errors`` from a full-record outcome."""
    errors.clear()
    if not outcome:
        errors.update(build_error_map(outcome.issues))


def patch_field_errors(errors: ErrorMap, field: str, outcome: ValidationOutcome) -> None:
    """Replace or remove only ``field``'s entry; other fields are left alone."""
    messages = outcome.messages
    if outcome or not messages:
        errors.pop(field, None)
    else:
        errors[field] = messages
