"""
Module: metadata
Purpose: Footer-only Parquet metadata extraction, run concurrently.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

import pyarrow.parquet as pq

from .exceptions import UnreadableMetadataError
from .models.fileinfo import FileMetadata
from .models.schema import FileSchema
from .utils import current_max_workers, log_error, log_warning


def read_file_metadata(path: str) -> FileMetadata:
    """
    Read schema and row count from a Parquet footer without scanning data.

    Args:
        path: File path to inspect.

    Returns:
        FileMetadata for the file.

    Raises:
        UnreadableMetadataError: When the footer cannot be read.
    """
    normalized = os.path.abspath(path)
    try:
        num_bytes = os.path.getsize(normalized)
        parquet_file = pq.ParquetFile(normalized)
        try:
            arrow_schema = parquet_file.schema_arrow
            footer = parquet_file.metadata
            columns = tuple((field.name, str(field.type)) for field in arrow_schema)
            return FileMetadata(
                path=normalized,
                schema=FileSchema(columns=columns),
                num_rows=footer.num_rows,
                num_bytes=num_bytes,
                num_row_groups=footer.num_row_groups,
            )
        finally:
            parquet_file.close()
    except Exception as exc:
        log_error(f"Failed to read Parquet metadata for {normalized}: {exc}")
        raise UnreadableMetadataError(normalized, str(exc)) from exc


def _read_or_error(path: str) -> FileMetadata | UnreadableMetadataError:
    """
    Helper for skip mode: return the error instead of raising it.
    """
    try:
        return read_file_metadata(path)
    except UnreadableMetadataError as exc:
        return exc


def collect_metadata(
    files: Sequence[str],
    *,
    max_workers: int | None = None,
    skip_unreadable: bool = False,
) -> Tuple[List[FileMetadata], List[str]]:
    """
    Read metadata for every file in parallel, preserving input order.

    Args:
        files: Enumerated input files.
        max_workers: Concurrency limit; defaults to the configured limit.
        skip_unreadable: Skip unreadable files instead of failing the batch.

    Returns:
        Tuple of (FileMetadata list aligned with readable inputs, skipped paths).

    Raises:
        UnreadableMetadataError: For the first unreadable file in input order
            when skip_unreadable is False.
    """
    if not files:
        return [], []
    workers = min(max_workers or current_max_workers(), len(files))
    if not skip_unreadable:
        if workers == 1:
            return [read_file_metadata(path) for path in files], []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(read_file_metadata, files)), []

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(_read_or_error, files))
    readable: List[FileMetadata] = []
    skipped: List[str] = []
    for result in results:
        if isinstance(result, UnreadableMetadataError):
            log_warning(f"Skipping unreadable file: {result.path} ({result.reason})")
            skipped.append(result.path)
        else:
            readable.append(result)
    return readable, skipped


def schemas_of(files: Sequence[str], *, max_workers: int | None = None) -> List[FileSchema]:
    """
    Schema of each file, index-aligned with files.
    """
    metadata, _ = collect_metadata(files, max_workers=max_workers)
    return [item.schema for item in metadata]


def row_counts_of(files: Sequence[str], *, max_workers: int | None = None) -> List[int]:
    """
    Row count of each file, index-aligned with files.
    """
    metadata, _ = collect_metadata(files, max_workers=max_workers)
    return [item.num_rows for item in metadata]
