"""
Module: cli
Purpose: Command-line interface entry point.
"""

import argparse
import io
import json
import os
import shutil
import sys
from typing import Any, List, Sequence

from . import aggregate, metadata, reporting, scanner
from .cli_formatter import CLIFormatter, detect_terminal_capabilities
from .columns import parse_column_specs
from .exceptions import (
    ColumnExistsError,
    ColumnSpecError,
    EmptySetError,
    MissingColumnError,
    NotFoundError,
    PathCollisionError,
    ReportError,
    ScanError,
    TablError,
    UnreadableMetadataError,
)
from .models.columnspec import ColumnSpec
from .models.inputspec import InputSpec
from .models.pathmapping import OutputPolicy, PathMapping
from .models.summary import AggregateSummary
from .output_paths import count_existing, derive_output_paths, display_paths
from .utils import (
    MAX_WORKERS_CAP,
    MAX_WORKERS_ENV,
    configure_max_workers,
    format_count,
    human_readable_size,
    log_info,
    plural,
)

N_SHOW_FILES = 10
N_EXAMPLE_PATHS = 3


def _terminal_rows() -> int:
    """
    Number of file lines that fit the terminal, leaving room for totals.
    """
    height = shutil.get_terminal_size((80, 104)).lines
    if height >= 5:
        return height - 4
    return 1


def _percent(part: int, whole: int) -> str:
    if whole <= 0:
        return "0.0%"
    return f"{100.0 * part / whole:.1f}%"


def _input_spec(args: argparse.Namespace) -> InputSpec:
    return InputSpec.from_args(
        args.paths,
        recursive=args.tree,
        resolve_symlinks=args.resolve_symlinks,
    )


def _emit_pipe_payload(formatter: CLIFormatter, payload: dict[str, Any]) -> None:
    if not formatter.config.pipe_mode:
        return
    target = getattr(formatter, "pipe_target", sys.stdout)
    if formatter.config.pipe_format == "kv":
        parts = []
        for key, value in payload.items():
            if isinstance(value, (list, dict)):
                value = len(value)
            parts.append(f"{key}={value}")
        target.write(" ".join(parts) + "\n")
        return
    target.write(json.dumps(payload, separators=(",", ":"), cls=reporting.EnhancedJSONEncoder) + "\n")


def _emit_pipe_failure(
    formatter: CLIFormatter,
    *,
    status: str,
    phase: str,
    reason: str,
    remediation: list[str],
) -> None:
    payload = {
        "schema_version": reporting.REPORT_SCHEMA_VERSION,
        "status": status.upper(),
        "phase": phase,
        "reason": reason,
        "remediation": remediation,
        "log": reporting.current_log_file() or "-",
    }
    _emit_pipe_payload(formatter, payload)


def _render_failure_summary(
    formatter: CLIFormatter,
    *,
    status: str,
    phase: str,
    reason: str,
    remediation: list[str],
) -> None:
    _emit_pipe_failure(
        formatter,
        status=status,
        phase=phase,
        reason=reason,
        remediation=remediation,
    )
    if formatter.config.pipe_mode:
        return
    normalized_status = status.upper()
    header_label = "FAILURE" if normalized_status == "FAILED" else normalized_status
    formatter.failure_summary(
        header=f"{header_label} SUMMARY — {phase}",
        reason=reason,
        log_hint=reporting.current_log_file(),
        remediation=remediation,
    )


def _remediation_for(exc: TablError) -> list[str]:
    if isinstance(exc, NotFoundError):
        return [
            "Check the path spelling.",
            "Omit paths to use the current directory.",
        ]
    if isinstance(exc, EmptySetError):
        return ["Pass --tree to search subdirectories, or point at a folder containing .parquet files."]
    if isinstance(exc, UnreadableMetadataError):
        return [
            f"Inspect or remove the damaged file: {exc.path}",
            "Re-run ls/schema with --skip-unreadable to report around it.",
        ]
    if isinstance(exc, PathCollisionError):
        return ["Choose a different --output-dir, --output-prefix or --output-postfix."]
    if isinstance(exc, MissingColumnError):
        return [f"Remove column {exc.column} from the request or exclude {exc.path}."]
    if isinstance(exc, ColumnExistsError):
        return [f"Pick a new column name; {exc.column} already exists in {exc.path}."]
    if isinstance(exc, ColumnSpecError):
        return ["Specify columns as NAME or NAME:TYPE, e.g. user_id:int64."]
    if isinstance(exc, ReportError):
        return [f"Check that {exc.path} is writable, or choose another location."]
    if isinstance(exc, ScanError):
        return ["Check directory permissions, or narrow the inputs to readable directories."]
    return ["Review the error message, address the reported issue, then rerun the command."]


def _render_empty(formatter: CLIFormatter, exc: EmptySetError, phase: str) -> None:
    """
    No matching files is reported, not treated as a failure.
    """
    _emit_pipe_payload(
        formatter,
        {
            "schema_version": reporting.REPORT_SCHEMA_VERSION,
            "status": "EMPTY",
            "phase": phase,
            "reason": str(exc),
            "total_files": 0,
        },
    )
    formatter.warning(str(exc))
    formatter.line("Nothing to do. No files have been changed.")


def _print_totals(formatter: CLIFormatter, summary: AggregateSummary) -> None:
    formatter.line(
        f"{formatter.label(format_count(summary.total_rows), level='ok')} rows stored in "
        f"{formatter.label(human_readable_size(summary.total_bytes), level='ok')} across "
        f"{formatter.label(format_count(summary.total_files), level='ok')} tabular "
        f"{plural(summary.total_files, 'file')}"
    )


def _warn_skipped(formatter: CLIFormatter, summary: AggregateSummary, shown: dict[str, str]) -> None:
    if not summary.skipped:
        return
    formatter.warning(
        f"Skipped {format_count(len(summary.skipped))} unreadable "
        f"{plural(len(summary.skipped), 'file')}; totals exclude them."
    )
    for path in summary.skipped[:N_SHOW_FILES]:
        formatter.bullet(formatter.path(shown.get(path, path)))


def _ls_flow(args: argparse.Namespace, formatter: CLIFormatter) -> None:
    """
    List tabular files with row and byte totals.
    """
    try:
        files = scanner.enumerate_files(_input_spec(args))
    except EmptySetError as exc:
        _render_empty(formatter, exc, "LS")
        return

    summary = aggregate.aggregate(files, skip_unreadable=args.skip_unreadable)
    shown = dict(zip(files, display_paths(files, absolute=args.absolute)))
    by_path = {item.path: item for item in summary.files}
    n_print = args.n if args.n is not None else _terminal_rows()

    for path in files[:n_print]:
        label = shown[path]
        item = by_path.get(path)
        if args.long and item is not None:
            formatter.line(
                f"{formatter.path(label)}  "
                f"{format_count(item.num_rows)} rows  "
                f"{human_readable_size(item.num_bytes)}  "
                f"{len(item.schema)} columns"
            )
        else:
            formatter.line(formatter.path(label))
    if n_print < len(files):
        formatter.muted(f"... {format_count(len(files) - n_print)} files not shown")

    if not args.files_only:
        _print_totals(formatter, summary)
    _warn_skipped(formatter, summary, shown)

    report = reporting.summary_report(summary, include_files=True)
    if args.report:
        reporting.write_json_report(report, args.report)
    _emit_pipe_payload(formatter, {"status": "OK", "phase": "LS", **report})


def _schema_flow(args: argparse.Namespace, formatter: CLIFormatter) -> None:
    """
    Show the distinct schemas across all files, largest first.
    """
    try:
        files = scanner.enumerate_files(_input_spec(args))
    except EmptySetError as exc:
        _render_empty(formatter, exc, "SCHEMA")
        return

    summary = aggregate.aggregate(files, sort_by=args.sort, skip_unreadable=args.skip_unreadable)
    shown = dict(zip(files, display_paths(files, absolute=args.absolute)))
    groups = summary.groups
    n_show = args.n_schemas if args.n_schemas is not None else len(groups)

    for index, group in enumerate(groups[:n_show], start=1):
        formatter.section(f"Schema {index} of {len(groups)}")
        formatter.kv(
            "Files",
            f"{format_count(group.file_count)} ({_percent(group.file_count, summary.total_files)})",
        )
        formatter.kv(
            "Rows",
            f"{format_count(group.total_rows)} ({_percent(group.total_rows, summary.total_rows)})",
        )
        formatter.kv(
            "Bytes",
            f"{human_readable_size(group.total_bytes)} ({_percent(group.total_bytes, summary.total_bytes)})",
        )
        formatter.line("  Columns:")
        for name, dtype in group.schema.columns:
            formatter.bullet(f"{formatter.label(name, level='accent')}: {dtype}", indent="    - ")
        if args.include_example_paths:
            formatter.line("  Example paths:")
            for path in group.paths[:N_EXAMPLE_PATHS]:
                formatter.bullet(formatter.path(shown.get(path, path)), indent="    - ")
    if n_show < len(groups):
        formatter.blank()
        formatter.muted(f"... {format_count(len(groups) - n_show)} more schemas not shown")

    formatter.blank()
    _print_totals(formatter, summary)
    formatter.line(
        f"{format_count(len(groups))} distinct {plural(len(groups), 'schema')} "
        f"(sorted by {args.sort})"
    )
    _warn_skipped(formatter, summary, shown)

    report = reporting.summary_report(summary)
    if args.report:
        reporting.write_json_report(report, args.report)
    _emit_pipe_payload(formatter, {"status": "OK", "phase": "SCHEMA", **report})


def _output_policy(args: argparse.Namespace) -> OutputPolicy:
    return OutputPolicy(
        output_dir=args.output_dir,
        prefix=args.output_prefix or "",
        postfix=args.output_postfix or "",
    )


def _print_file_list(formatter: CLIFormatter, files: Sequence[str], relative: bool) -> None:
    formatter.line("files:")
    cwd = os.getcwd()
    for path in files[:N_SHOW_FILES]:
        label = os.path.relpath(path, cwd) if relative else path
        formatter.bullet(formatter.path(label), indent="- ")
    if len(files) > N_SHOW_FILES:
        formatter.line("...")


def _describe_destination(formatter: CLIFormatter, policy: OutputPolicy) -> str:
    if policy.redirects:
        location = f"writing outputs to directory {formatter.path(os.path.abspath(policy.output_dir))}"
    elif policy.renames:
        location = "writing outputs beside the inputs"
    else:
        return "editing files in place"
    if policy.renames:
        location += f" as {policy.prefix}<name>{policy.postfix}"
    return location


def _render_edit_preview(
    formatter: CLIFormatter,
    *,
    verb: str,
    columns: Sequence[ColumnSpec],
    mapping: PathMapping,
    policy: OutputPolicy,
    relative: bool,
    existing: int,
    show_output_paths: bool,
) -> None:
    _print_file_list(formatter, mapping.inputs, relative)
    columns_str = ", ".join(formatter.label(str(column), level="accent") for column in columns)
    formatter.blank()
    formatter.line(
        f"{verb} {plural(len(columns), 'column')} {columns_str} "
        f"{'into' if verb == 'inserting' else 'from'} "
        f"{formatter.label(format_count(len(mapping)))} {plural(len(mapping), 'file')}, "
        f"{_describe_destination(formatter, policy)}"
    )
    if existing:
        formatter.warning(
            f"{format_count(existing)} of the output files already exist and will be overwritten"
        )
    if show_output_paths:
        formatter.line("output paths:")
        for src, dst in mapping:
            formatter.bullet(f"{formatter.path(src)} -> {formatter.path(dst)}", indent="- ")
    formatter.success(
        f"Column checks passed for all {format_count(len(mapping))} input "
        f"{plural(len(mapping), 'file')}."
    )
    formatter.muted("Preview only — no files were changed.")


def _edit_preview_flow(args: argparse.Namespace, formatter: CLIFormatter, action: str) -> None:
    """
    Resolve inputs and outputs for an edit and validate its column preconditions.
    """
    columns: List[ColumnSpec] = parse_column_specs(args.columns, require_type=action == "insert")
    policy = _output_policy(args)
    files = scanner.enumerate_files(_input_spec(args))
    mapping = derive_output_paths(files, policy)
    file_metadata, _ = metadata.collect_metadata(files)
    if action == "drop":
        aggregate.require_columns(file_metadata, columns)
    else:
        aggregate.require_absent_columns(file_metadata, columns)

    existing = 0 if policy.in_place else count_existing(mapping.outputs)
    _render_edit_preview(
        formatter,
        verb="dropping" if action == "drop" else "inserting",
        columns=columns,
        mapping=mapping,
        policy=policy,
        relative=not args.paths,
        existing=existing,
        show_output_paths=args.show_output_paths,
    )
    report = reporting.plan_report(action, columns, mapping, policy, existing)
    _emit_pipe_payload(formatter, {"status": "PREVIEW", "phase": action.upper(), **report})


def _max_workers_arg(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Max workers must be an integer.") from exc
    if parsed < 1 or parsed > MAX_WORKERS_CAP:
        raise argparse.ArgumentTypeError(f"Max workers must be between 1 and {MAX_WORKERS_CAP}.")
    return parsed


def _count_arg(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Count must be an integer.") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("Count must be zero or greater.")
    return parsed


def _add_input_arguments(parser: argparse.ArgumentParser, *, positional: bool = True) -> None:
    if positional:
        parser.add_argument(
            "paths",
            nargs="*",
            help="Input file(s) or directories (default: current directory)",
        )
    else:
        # Edit commands take columns positionally, so inputs need a flag.
        parser.add_argument(
            "-i",
            "--inputs",
            dest="paths",
            nargs="+",
            default=None,
            help="Input file(s) or directories (default: current directory)",
        )
    parser.add_argument(
        "-r",
        "--tree",
        action="store_true",
        help="Recursively include all tabular files in each directory tree",
    )
    parser.add_argument(
        "--resolve-symlinks",
        action="store_true",
        help="Deduplicate inputs by their resolved real path",
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output-dir", default=None, help="Output directory to write modified files")
    parser.add_argument("--output-prefix", default=None, help="Prefix to add to output filenames")
    parser.add_argument("--output-postfix", default=None, help="Postfix to add to output filenames")
    parser.add_argument("--show-output-paths", action="store_true", help="Show each input/output pair")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabl",
        description="tabl CLI. Inspect and plan edits across collections of Parquet files.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors regardless of terminal support.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Plain mode: ASCII-only separators, no ANSI colors.",
    )
    parser.add_argument(
        "--ascii",
        dest="force_ascii",
        action="store_true",
        help="Force ASCII output even if the terminal supports Unicode.",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default=None,
        help="Force color usage: auto (default), always, or never.",
    )
    parser.add_argument(
        "--theme",
        choices=["light", "dark"],
        default=None,
        help="Theme palette: light (default) or dark.",
    )
    parser.add_argument(
        "--mode",
        choices=["auto", "tty", "plain", "pipe"],
        default="auto",
        help="Force output mode: auto (default), tty, plain, or pipe (single-line).",
    )
    parser.add_argument(
        "--pipe-format",
        choices=["json", "kv"],
        default="json",
        help="In pipe mode, output single-line JSON (default) or key/value pairs.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print configuration and file resolution details.",
    )
    parser.add_argument(
        "--max-workers",
        type=_max_workers_arg,
        default=None,
        help=f"Concurrent metadata reads (also configurable via ${MAX_WORKERS_ENV}).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help=f"Append diagnostics to this file (also configurable via ${reporting.LOG_FILE_ENV}).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ls_parser = subparsers.add_parser(
        "ls",
        help="Show list of tabular files",
        description="List tabular files with total row and byte counts. Read-only.",
    )
    _add_input_arguments(ls_parser)
    ls_parser.add_argument("--n", type=_count_arg, default=None, help="Number of file names to print")
    ls_parser.add_argument("--absolute", action="store_true", help="Show absolute paths instead of relative")
    ls_parser.add_argument("--long", action="store_true", help="Show rows, size and column count per file")
    ls_parser.add_argument("--files-only", action="store_true", help="Show files only, no totals")
    ls_parser.add_argument("--skip-unreadable", action="store_true", help="Skip files whose metadata cannot be read")
    ls_parser.add_argument("--report", default=None, help="Also write the summary as JSON to this path")

    schema_parser = subparsers.add_parser(
        "schema",
        help="Show schema of tabular files",
        description="Group files by identical schema and summarize each group. Read-only.",
    )
    _add_input_arguments(schema_parser)
    schema_parser.add_argument("--absolute", action="store_true", help="Show absolute paths instead of relative")
    schema_parser.add_argument("--n-schemas", type=_count_arg, default=None, help="Print top n schemas")
    schema_parser.add_argument(
        "--include-example-paths",
        action="store_true",
        help="Print example paths of each schema",
    )
    schema_parser.add_argument(
        "--sort",
        choices=list(aggregate.SORT_KEYS),
        default="bytes",
        help="Sort schemas by byte count (default), row count, or file count",
    )
    schema_parser.add_argument("--skip-unreadable", action="store_true", help="Skip files whose metadata cannot be read")
    schema_parser.add_argument("--report", default=None, help="Also write the summary as JSON to this path")

    drop_parser = subparsers.add_parser(
        "drop",
        help="Preview dropping columns from tabular files",
        description=(
            "Drop resolves inputs and output paths and checks that every file contains every column.\n"
            "It is a preview: no files are modified."
        ),
    )
    drop_parser.add_argument("columns", nargs="+", help="Columns to drop, as NAME or NAME:TYPE")
    _add_input_arguments(drop_parser, positional=False)
    _add_output_arguments(drop_parser)

    insert_parser = subparsers.add_parser(
        "insert",
        help="Preview inserting columns into tabular files",
        description=(
            "Insert resolves inputs and output paths and checks that no file already has the new columns.\n"
            "It is a preview: no files are modified."
        ),
    )
    insert_parser.add_argument("columns", nargs="+", help="Columns to insert, as NAME:TYPE")
    _add_input_arguments(insert_parser, positional=False)
    _add_output_arguments(insert_parser)
    return parser


def main():
    """
    Argument parser entry point.

    Raises:
        SystemExit: When execution fails.
    """
    parser = _build_parser()
    args = parser.parse_args()

    formatter_config = detect_terminal_capabilities(
        color_preference=args.color,
        plain_mode=args.plain,
        force_ascii=args.force_ascii,
        no_color_flag=args.no_color,
        stdout_isatty=sys.stdout.isatty(),
        mode_preference=args.mode,
        theme_preference=args.theme,
    )
    formatter_config.verbose = args.verbose
    formatter_config.pipe_format = args.pipe_format
    pipe_stream = None
    if formatter_config.pipe_mode:
        pipe_stream = io.StringIO()
    formatter = CLIFormatter(formatter_config, stream=pipe_stream or sys.stdout)
    if pipe_stream:
        formatter.pipe_target = sys.stdout

    try:
        log_file = reporting.configure_log_file(args.log_file)
        max_workers, workers_source = configure_max_workers(args.max_workers)
        formatter.verbose(f"max workers: {max_workers} (source={workers_source})")
        formatter.verbose(f"log file: {log_file or 'disabled'}")
        log_info(f"Command {args.command} started")

        if args.command == "ls":
            _ls_flow(args, formatter)
        elif args.command == "schema":
            _schema_flow(args, formatter)
        elif args.command in {"drop", "insert"}:
            _edit_preview_flow(args, formatter, args.command)
    except KeyboardInterrupt:
        reporting.write_log(["[WARNING] Operation aborted via Ctrl+C"])
        _render_failure_summary(
            formatter,
            status="ABORTED",
            phase=args.command.upper(),
            reason="Interrupted by user (Ctrl+C).",
            remediation=["Re-run the command when ready."],
        )
        sys.exit(1)
    except TablError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        _render_failure_summary(
            formatter,
            status="FAILED",
            phase=args.command.upper(),
            reason=str(exc),
            remediation=_remediation_for(exc),
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
