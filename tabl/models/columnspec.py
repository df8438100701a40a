"""
Module: columnspec
Purpose: Validated column name with optional type.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ColumnSpec:
    """
    A column requested on the command line, e.g. `user_id` or `user_id:int64`.
    """

    name: str
    dtype: Optional[str] = None

    def __str__(self) -> str:
        if self.dtype:
            return f"{self.name}:{self.dtype}"
        return self.name
