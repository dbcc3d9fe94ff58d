import json
import logging
from pathlib import Path
from typing import Any

import typer

from form_state.core import load_record, load_schema
from form_state.errors import FormStateError
from form_state.form import FormState
from form_state.loggy import setup_logging

logger = logging.getLogger(__name__)

EXIT_INVALID = 1
EXIT_USAGE = 2

app = typer.Typer(help="Validate and diff records against form schemas.")


@app.callback()
def configure(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log engine activity at DEBUG level"
    ),
):
    """Configure logging before running a command."""
    setup_logging(level=logging.DEBUG if verbose else None)


def _emit(report: dict[str, Any]) -> None:
    typer.echo(json.dumps(report, indent=2, default=str))


@app.command()
def check(
    schema: str = typer.Argument(..., help="Schema reference as module:attribute"),
    data_file: Path = typer.Argument(..., help="JSON file holding the record"),
    field: list[str] = typer.Option(
        [],
        "--field",
        "-f",
        help="Validate only this field (repeatable); skips whole-record rules",
    ),
):
    """Validate a record and print the value and errors as JSON."""
    try:
        form = FormState(load_schema(schema), load_record(data_file))
        if field:
            for name in field:
                form.validate_field(name)
            value = None
            valid = not form.errors
        else:
            outcome = form.validate_outcome()
            value = outcome.value
            valid = outcome.success
    except FormStateError as e:
        logger.error(f"Check failed: {e}")
        raise typer.Exit(code=EXIT_USAGE)

    logger.info(f"Record {data_file} is {'valid' if valid else 'invalid'}")
    _emit({"valid": valid, "value": value, "errors": form.errors})
    if not valid:
        raise typer.Exit(code=EXIT_INVALID)


@app.command()
def diff(
    schema: str = typer.Argument(..., help="Schema reference as module:attribute"),
    initial_file: Path = typer.Argument(..., help="JSON file with the baseline record"),
    current_file: Path = typer.Argument(..., help="JSON file with the edited record"),
):
    """Report which fields of the edited record differ from the baseline."""
    try:
        form = FormState(load_schema(schema), load_record(initial_file))
        current = load_record(current_file)
    except FormStateError as e:
        logger.error(f"Diff failed: {e}")
        raise typer.Exit(code=EXIT_USAGE)

    for name in list(form.data):
        if name not in current:
            form.unset_value(name)
    for name, value in current.items():
        form.set_value(name, value)

    _emit({"dirty": form.is_dirty, "fields": form.dirty_fields()})


if __name__ == "__main__":
    app()
