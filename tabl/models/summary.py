"""
Module: summary
Purpose: Aggregate summary dataclass.
"""

from dataclasses import dataclass, field
from typing import List

from .fileinfo import FileMetadata
from .schema import SchemaGroup


@dataclass(frozen=True)
class AggregateSummary:
    """
    Totals and schema groups for one batch of files, built once per command.
    """

    files: List[FileMetadata]
    groups: List[SchemaGroup]
    total_rows: int
    total_bytes: int
    total_files: int
    skipped: List[str] = field(default_factory=list)
