"""
Module: cli_formatter
Purpose: Terminal rendering for tabl: styled lines, schema sections and failure boxes.
"""

from __future__ import annotations

import os
import sys
import textwrap
from dataclasses import dataclass
from typing import TextIO

from .utils import BOLD, COLOR_RESET, color_256

BOX_WIDTH = 96
KV_WIDTH = 24
INDENT = "  "
UNICODE_BOX = ("─", "│", "┌", "┐", "└", "┘")
ASCII_BOX = ("-", "|", "+", "+", "+", "+")
OUTPUT_MODES = {"auto", "tty", "plain", "pipe"}
COLOR_CHOICES = {"auto", "always", "never"}
THEME_PALETTES: dict[str, dict[str, int]] = {
    "light": {"primary": 74, "accent": 141, "ok": 64, "warn": 221, "error": 160, "path": 133, "muted": 243},
    "dark": {"primary": 75, "accent": 105, "ok": 76, "warn": 221, "error": 160, "path": 177, "muted": 245},
}


@dataclass
class FormatterConfig:
    """
    Rendering options, resolved once per run by detect_terminal_capabilities.
    """

    use_color: bool = True
    unicode_enabled: bool = True
    plain_mode: bool = False
    verbose: bool = False
    mode: str = "tty"
    pipe_mode: bool = False
    pipe_format: str = "json"
    theme: str = "light"


class CLIFormatter:
    """
    Writes human-facing output. In pipe mode the stream is a buffer and the
    single machine-readable line goes to pipe_target instead.
    """

    def __init__(self, config: FormatterConfig | None = None, stream: TextIO | None = None) -> None:
        self.config = config or FormatterConfig()
        self.stream = stream or sys.stdout
        palette = THEME_PALETTES.get(self.config.theme, THEME_PALETTES["light"])
        self.palette = {key: color_256(code) for key, code in palette.items()}

    @property
    def _fancy(self) -> bool:
        return self.config.unicode_enabled and not self.config.plain_mode

    def line(self, text: str = "") -> None:
        self._write(text)

    def blank(self) -> None:
        self._write("")

    def section(self, title: str, icon: str = "◆") -> None:
        """Blank line, then a bold heading such as "◆ Schema 1 of 3"."""
        marker = icon if self._fancy else ">"
        self.blank()
        self._write(self._style(f"{marker} {title}", "primary", bold=True))

    def success(self, text: str) -> None:
        self._write(self._style(text, "ok", bold=True))

    def warning(self, text: str) -> None:
        self._write(self._style(text, "warn", bold=True))

    def muted(self, text: str) -> None:
        self._write(self._style(text, "muted"))

    def verbose(self, text: str) -> None:
        if self.config.verbose:
            self.muted(f"[verbose] {text}")

    def kv(self, label: str, value: str) -> None:
        self._write(f"{INDENT}{label:<{KV_WIDTH}} : {value}")

    def bullet(self, text: str, indent: str = f"{INDENT}- ") -> None:
        self._write(f"{indent}{text}")

    def path(self, text: str) -> str:
        return self._style(text, "path")

    def label(self, text: str, level: str = "primary") -> str:
        """Inline bold text in one of the palette colors (primary, accent, ok, ...)."""
        return self._style(text, level, bold=True)

    def failure_summary(
        self,
        *,
        header: str,
        reason: str,
        log_hint: str | None = None,
        remediation: list[str] | None = None,
    ) -> None:
        """
        Boxed summary of why a command stopped and what to do next.

        The first remediation step is the required one; later steps are
        listed as alternatives. Nothing is rendered in pipe mode.
        """
        if self.config.pipe_mode:
            return
        steps = list(remediation or [])
        if not steps:
            steps = [f"Review {log_hint} for details." if log_hint else "Review the error and rerun when ready."]
        lines = [f"Reason: {reason}"]
        if log_hint:
            lines.append(f"Log file: {log_hint}")
        lines.append(f"Required: {steps[0]}")
        lines.extend(f"Also: {step}" for step in steps[1:])

        horiz, vert, top_left, top_right, bottom_left, bottom_right = UNICODE_BOX if self._fancy else ASCII_BOX
        title = f"{horiz} {header} "
        content_width = BOX_WIDTH - 4
        self.blank()
        self._write(self._style(f"{top_left}{title}{horiz * max(0, BOX_WIDTH - 2 - len(title))}{top_right}", "error"))
        for text in lines:
            for chunk in textwrap.wrap(text, width=content_width) or [""]:
                self._write(f"{vert} {chunk.ljust(content_width)} {vert}")
        self._write(f"{bottom_left}{horiz * (BOX_WIDTH - 2)}{bottom_right}")

    def _write(self, text: str) -> None:
        self.stream.write(text + "\n")

    def _style(self, text: str, color: str | None = None, bold: bool = False) -> str:
        if not self.config.use_color or not text:
            return text
        prefix = (BOLD if bold else "") + (self.palette.get(color, "") if color else "")
        return f"{prefix}{text}{COLOR_RESET}" if prefix else text


def detect_terminal_capabilities(
    *,
    color_preference: str | None = None,
    plain_mode: bool = False,
    force_ascii: bool = False,
    no_color_flag: bool = False,
    stdout_isatty: bool | None = None,
    mode_preference: str = "auto",
    theme_preference: str | None = None,
) -> FormatterConfig:
    """
    Resolve flags and environment (NO_COLOR, TERM, TABL_PLAIN, TABL_FORCE_ASCII,
    TABL_COLOR, TABL_THEME) into a FormatterConfig.

    Pipe and plain modes never color. Auto mode degrades to plain when stdout
    is not a terminal; pipe mode is only ever explicit.
    """
    mode = (mode_preference or "auto").lower()
    if mode not in OUTPUT_MODES:
        mode = "auto"
    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()
    theme = _resolve_theme(theme_preference)

    plain = plain_mode or bool(os.environ.get("TABL_PLAIN")) or mode in {"plain", "pipe"}
    if plain or (mode == "auto" and not stdout_isatty):
        pipe_mode = mode == "pipe"
        return FormatterConfig(
            use_color=False,
            unicode_enabled=False,
            plain_mode=True,
            mode="pipe" if pipe_mode else "plain",
            pipe_mode=pipe_mode,
            theme=theme,
        )

    term = os.environ.get("TERM", "").lower()
    preference = (color_preference or os.environ.get("TABL_COLOR", "auto")).lower()
    if preference not in COLOR_CHOICES:
        preference = "auto"
    if preference == "auto":
        use_color = not no_color_flag and not os.environ.get("NO_COLOR") and stdout_isatty and term != "dumb"
    else:
        use_color = preference == "always"

    ascii_forced = force_ascii or bool(os.environ.get("TABL_FORCE_ASCII")) or term == "dumb"
    return FormatterConfig(
        use_color=bool(use_color),
        unicode_enabled=not ascii_forced and _supports_unicode(),
        mode="tty",
        theme=theme,
    )


def _resolve_theme(theme_preference: str | None) -> str:
    theme = (theme_preference or os.environ.get("TABL_THEME", "light")).strip().lower()
    return theme if theme in THEME_PALETTES else "light"


def _supports_unicode() -> bool:
    encoding = getattr(sys.stdout, "encoding", None)
    if not encoding:
        return False
    try:
        "┌".encode(encoding)
    except UnicodeEncodeError:
        return False
    return True
