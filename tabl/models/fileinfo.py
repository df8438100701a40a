"""
Module: fileinfo
Purpose: Dataclass representing footer metadata of one tabular file.
"""

from dataclasses import dataclass

from .schema import FileSchema


@dataclass(frozen=True)
class FileMetadata:
    """
    Structural metadata read from a single Parquet footer.
    """

    path: str
    schema: FileSchema
    num_rows: int
    num_bytes: int
    num_row_groups: int = 0
