"""
Module: schema
Purpose: Column schema of a file and groups of files sharing one.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class FileSchema:
    """
    Ordered (column name, column type) pairs.

    Equality is order-sensitive; membership checks are not.
    """

    columns: Tuple[Tuple[str, str], ...]

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.columns]

    def contains(self, name: str) -> bool:
        return any(column == name for column, _ in self.columns)

    def type_of(self, name: str) -> Optional[str]:
        for column, dtype in self.columns:
            if column == name:
                return dtype
        return None

    def __len__(self) -> int:
        return len(self.columns)


@dataclass
class SchemaGroup:
    """
    Files sharing an identical schema, with aggregated totals.
    """

    schema: FileSchema
    paths: List[str] = field(default_factory=list)
    total_rows: int = 0
    total_bytes: int = 0

    @property
    def file_count(self) -> int:
        return len(self.paths)
