"""
Module: columns
Purpose: Parse column arguments into validated ColumnSpec values.
"""

from typing import Iterable, List

import pyarrow as pa

from .exceptions import ColumnSpecError
from .models.columnspec import ColumnSpec


def normalize_dtype(dtype: str) -> str:
    """
    Canonical Arrow type string for an alias such as "i8" or "str".

    Raises:
        ColumnSpecError: If pyarrow does not know the alias.
    """
    try:
        return str(pa.type_for_alias(dtype.strip()))
    except (KeyError, ValueError) as exc:
        raise ColumnSpecError(f"Unknown column type '{dtype}'") from exc


def parse_column_spec(text: str, *, require_type: bool = False) -> ColumnSpec:
    """
    Parse `NAME` or `NAME:TYPE`.

    Raises:
        ColumnSpecError: If the name is empty, the type is unknown, or a
            type is required and absent.
    """
    name, sep, dtype = text.partition(":")
    name = name.strip()
    if not name:
        raise ColumnSpecError(f"Invalid column specification '{text}': missing column name")
    if not sep:
        if require_type:
            raise ColumnSpecError(f"Invalid column specification '{text}': expected NAME:TYPE")
        return ColumnSpec(name=name)
    if not dtype.strip():
        raise ColumnSpecError(f"Invalid column specification '{text}': missing type after ':'")
    return ColumnSpec(name=name, dtype=normalize_dtype(dtype))


def parse_column_specs(values: Iterable[str], *, require_type: bool = False) -> List[ColumnSpec]:
    """
    Parse every value, rejecting empty input and duplicate names.
    """
    specs = [parse_column_spec(value, require_type=require_type) for value in values]
    if not specs:
        raise ColumnSpecError("Must specify at least one column")
    seen: set[str] = set()
    for spec in specs:
        if spec.name in seen:
            raise ColumnSpecError(f"Column '{spec.name}' specified more than once")
        seen.add(spec.name)
    return specs
