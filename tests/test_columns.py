import pytest

from tabl.columns import normalize_dtype, parse_column_spec, parse_column_specs
from tabl.exceptions import ColumnSpecError
from tabl.models.columnspec import ColumnSpec


def test_parse_name_only():
    assert parse_column_spec("user_id") == ColumnSpec("user_id")


def test_parse_name_and_alias_type():
    assert parse_column_spec("user_id:i4") == ColumnSpec("user_id", "int32")
    assert parse_column_spec("label: str") == ColumnSpec("label", "string")


def test_unknown_type_rejected():
    with pytest.raises(ColumnSpecError):
        parse_column_spec("x:not_a_type")


def test_missing_name_or_type_rejected():
    with pytest.raises(ColumnSpecError):
        parse_column_spec(":int64")
    with pytest.raises(ColumnSpecError):
        parse_column_spec("x:")


def test_type_required_for_insert():
    with pytest.raises(ColumnSpecError):
        parse_column_spec("x", require_type=True)


def test_parse_specs_rejects_duplicates_and_empty():
    with pytest.raises(ColumnSpecError):
        parse_column_specs(["a", "a:int64"])
    with pytest.raises(ColumnSpecError):
        parse_column_specs([])
    assert [str(spec) for spec in parse_column_specs(["a", "b:float64"])] == ["a", "b:double"]


def test_normalize_dtype_matches_arrow_names():
    assert normalize_dtype("float64") == "double"
    assert normalize_dtype("bool") == "bool"
