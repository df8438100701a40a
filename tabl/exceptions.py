"""
Module: exceptions
Purpose: Custom exception hierarchy for tabl.
"""


class TablError(Exception):
    """Base exception for tabl."""

    pass


class ScanError(TablError):
    pass


class NotFoundError(ScanError):
    def __init__(self, path: str):
        super().__init__(f"Input path does not exist: {path}")
        self.path = path


class EmptySetError(ScanError):
    pass


class MetadataError(TablError):
    pass


class UnreadableMetadataError(MetadataError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to read Parquet metadata for {path}: {reason}")
        self.path = path
        self.reason = reason


class OutputPathError(TablError):
    pass


class PathCollisionError(OutputPathError):
    def __init__(self, inputs: tuple[str, str], output: str, message: str | None = None):
        first, second = inputs
        super().__init__(
            message
            or f"Output path collision: {first} and {second} would both be written to {output}"
        )
        self.inputs = inputs
        self.output = output


class ColumnError(TablError):
    pass


class ColumnSpecError(ColumnError):
    pass


class MissingColumnError(ColumnError):
    def __init__(self, path: str, column: str):
        super().__init__(f"File does not contain column {column}: {path}")
        self.path = path
        self.column = column


class ColumnExistsError(ColumnError):
    def __init__(self, path: str, column: str):
        super().__init__(f"File already contains column {column}: {path}")
        self.path = path
        self.column = column


class ReportError(TablError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to write {path}: {reason}")
        self.path = path
        self.reason = reason
