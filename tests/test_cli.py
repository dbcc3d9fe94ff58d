"""Tests for the form-state command line."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from form_state.cli import EXIT_INVALID, EXIT_USAGE, app
from form_state.core import load_record, load_schema
from form_state.errors import ConfigurationError

SCHEMA_MODULE = '''
from typing import Annotated

from pydantic import Field

from form_state import FieldMapSchema

signup = FieldMapSchema(
    name=Annotated[str, Field(min_length=3)],
    age=Annotated[int, Field(ge=18)],
).transform(lambda data: {**data, "full_name": f"{data['name']} Doe"})

discard = signup.transform(lambda data: None)

not_a_schema = "signup"
'''

runner = CliRunner()


@pytest.fixture
def schema_ref(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    (tmp_path / "cli_signup_forms.py").write_text(SCHEMA_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delenv("FORM_STATE_LOG_LEVEL", raising=False)
    return "cli_signup_forms:signup"


def _write(tmp_path: Path, name: str, payload) -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return path


def test_check_valid_record(schema_ref: str, tmp_path: Path) -> None:
    """A valid record exits 0 and prints the transformed value."""
    data = _write(tmp_path, "ok.json", {"name": "John", "age": 30})
    result = runner.invoke(app, ["check", schema_ref, str(data)])
    assert result.exit_code == 0
    report = json.loads(result.stdout)
    assert report["valid"] is True
    assert report["value"]["full_name"] == "John Doe"
    assert report["errors"] == {}


def test_check_invalid_record(schema_ref: str, tmp_path: Path) -> None:
    """An invalid record exits 1 and lists the failing fields."""
    data = _write(tmp_path, "bad.json", {"name": "Jo", "age": 12})
    result = runner.invoke(app, ["check", schema_ref, str(data)])
    assert result.exit_code == EXIT_INVALID
    report = json.loads(result.stdout)
    assert report["valid"] is False
    assert report["value"] is None
    assert set(report["errors"]) == {"name", "age"}


def test_check_single_field(schema_ref: str, tmp_path: Path) -> None:
    """--field limits validation to the named fields."""
    data = _write(tmp_path, "partial.json", {"name": "John", "age": 12})
    result = runner.invoke(app, ["check", schema_ref, str(data), "--field", "name"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["errors"] == {}


def test_check_unknown_field_is_usage_error(schema_ref: str, tmp_path: Path) -> None:
    """Asking for an undeclared field exits 2."""
    data = _write(tmp_path, "ok.json", {"name": "John", "age": 30})
    result = runner.invoke(app, ["check", schema_ref, str(data), "-f", "phone"])
    assert result.exit_code == EXIT_USAGE


def test_check_rejects_non_schema(schema_ref: str, tmp_path: Path) -> None:
    """A reference to something that is not a schema exits 2."""
    data = _write(tmp_path, "ok.json", {"name": "John", "age": 30})
    result = runner.invoke(app, ["check", "cli_signup_forms:not_a_schema", str(data)])
    assert result.exit_code == EXIT_USAGE


def test_diff_reports_changed_fields(schema_ref: str, tmp_path: Path) -> None:
    """Diff lists changed and removed fields."""
    initial = _write(tmp_path, "initial.json", {"name": "John", "age": 30})
    current = _write(tmp_path, "current.json", {"name": "Jane"})
    result = runner.invoke(app, ["diff", schema_ref, str(initial), str(current)])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"dirty": True, "fields": ["name", "age"]}


def test_diff_identical_records(schema_ref: str, tmp_path: Path) -> None:
    """Identical records are not dirty."""
    initial = _write(tmp_path, "initial.json", {"name": "John", "age": 30})
    result = runner.invoke(app, ["diff", schema_ref, str(initial), str(initial)])
    assert json.loads(result.stdout) == {"dirty": False, "fields": []}


@pytest.mark.parametrize(
    "reference", ["no_colon", ":attr", "module:", "missing_module_xyz:schema"]
)
def test_load_schema_rejects_bad_references(reference: str) -> None:
    """Malformed or unimportable references are configuration errors."""
    with pytest.raises(ConfigurationError):
        load_schema(reference)


def test_load_schema_follows_nested_attributes() -> None:
    """Dotted attributes after the colon are resolved."""
    assert load_schema("form_state.models:ValidationMode.ON_BLUR") == "onBlur"


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_load_record_rejects_non_objects(tmp_path: Path, content: str) -> None:
    """Records must be JSON objects."""
    path = tmp_path / "record.json"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_record(path)


def test_load_record_missing_file(tmp_path: Path) -> None:
    """A missing file is a configuration error."""
    with pytest.raises(ConfigurationError):
        load_record(tmp_path / "absent.json")


def test_check_transform_returning_none_is_valid(
    schema_ref: str, tmp_path: Path
) -> None:
    """Validity comes from the outcome, not from the value being set."""
    data = _write(tmp_path, "ok.json", {"name": "John", "age": 30})
    result = runner.invoke(app, ["check", "cli_signup_forms:discard", str(data)])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"valid": True, "value": None, "errors": {}}
