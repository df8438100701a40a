"""
Module: aggregate
Purpose: Fold per-file metadata into schema groups and run column checks.
"""

from typing import Dict, List, Sequence, Tuple

from .exceptions import ColumnExistsError, EmptySetError, MissingColumnError
from .metadata import collect_metadata
from .models.columnspec import ColumnSpec
from .models.fileinfo import FileMetadata
from .models.schema import FileSchema, SchemaGroup
from .models.summary import AggregateSummary
from .utils import log_error

SORT_KEYS = ("bytes", "rows", "files")


def _group_sort_key(sort_by: str):
    if sort_by == "bytes":
        return lambda group: group.total_bytes
    if sort_by == "rows":
        return lambda group: group.total_rows
    if sort_by == "files":
        return lambda group: group.file_count
    raise ValueError(f"Unknown schema sort key '{sort_by}'. Expected one of: {', '.join(SORT_KEYS)}")


def group_by_schema(metadata: Sequence[FileMetadata], sort_by: str = "bytes") -> List[SchemaGroup]:
    """
    Cluster files with structurally equal schemas.

    Schemas that differ only in column order are distinct groups.

    Args:
        metadata: Per-file metadata in input order.
        sort_by: "bytes" (default), "rows" or "files", sorted descending.

    Returns:
        SchemaGroups; ties keep first-appearance order.
    """
    key = _group_sort_key(sort_by)
    groups: Dict[FileSchema, SchemaGroup] = {}
    for item in metadata:
        group = groups.get(item.schema)
        if group is None:
            group = SchemaGroup(schema=item.schema)
            groups[item.schema] = group
        group.paths.append(item.path)
        group.total_rows += item.num_rows
        group.total_bytes += item.num_bytes
    return sorted(groups.values(), key=key, reverse=True)


def summarize(
    metadata: Sequence[FileMetadata],
    skipped: Sequence[str] = (),
    sort_by: str = "bytes",
) -> AggregateSummary:
    """
    Build an AggregateSummary from already-collected metadata.
    """
    return AggregateSummary(
        files=list(metadata),
        groups=group_by_schema(metadata, sort_by=sort_by),
        total_rows=sum(item.num_rows for item in metadata),
        total_bytes=sum(item.num_bytes for item in metadata),
        total_files=len(metadata),
        skipped=list(skipped),
    )


def aggregate(
    files: Sequence[str],
    *,
    sort_by: str = "bytes",
    max_workers: int | None = None,
    skip_unreadable: bool = False,
) -> AggregateSummary:
    """
    Read metadata for all files and fold it into one summary.

    Raises:
        EmptySetError: If files is empty.
        UnreadableMetadataError: If any footer cannot be read (default policy).
    """
    if not files:
        raise EmptySetError("No tabular files to summarize")
    _group_sort_key(sort_by)
    metadata, skipped = collect_metadata(
        files, max_workers=max_workers, skip_unreadable=skip_unreadable
    )
    return summarize(metadata, skipped=skipped, sort_by=sort_by)


def _matches(schema: FileSchema, column: ColumnSpec) -> bool:
    if not schema.contains(column.name):
        return False
    if column.dtype is None:
        return True
    return schema.type_of(column.name) == column.dtype


def find_missing_columns(
    metadata: Sequence[FileMetadata], columns: Sequence[ColumnSpec]
) -> List[Tuple[str, ColumnSpec]]:
    """
    Every (path, column) pair where the file lacks the column (or its type).
    """
    missing: List[Tuple[str, ColumnSpec]] = []
    for item in metadata:
        for column in columns:
            if not _matches(item.schema, column):
                missing.append((item.path, column))
    return missing


def require_columns(metadata: Sequence[FileMetadata], columns: Sequence[ColumnSpec]) -> None:
    """
    Raises:
        MissingColumnError: Naming the first file missing a required column.
    """
    missing = find_missing_columns(metadata, columns)
    if missing:
        path, column = missing[0]
        log_error(f"{len(missing)} missing column check(s); first: {column} in {path}")
        raise MissingColumnError(path, str(column))


def require_absent_columns(metadata: Sequence[FileMetadata], columns: Sequence[ColumnSpec]) -> None:
    """
    Raises:
        ColumnExistsError: Naming the first file that already has a column.
    """
    for item in metadata:
        for column in columns:
            if item.schema.contains(column.name):
                log_error(f"Column {column.name} already present in {item.path}")
                raise ColumnExistsError(item.path, column.name)
