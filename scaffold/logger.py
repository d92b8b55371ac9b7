"""
Scaffold logger: syslog-ordered, timestamped, optionally colorized diagnostics.

Contract
- Eight leveled methods, most severe first: emergency, alert, critical, error,
  warning, notice, info, debug (ranks 0..7, syslog ordering).
- Each accepts one or more message fragments (joined with a single space) and
  optional keyword context (appended as key=value pairs).
- A record of rank s is written iff s <= settings.verbosity. Emergency is always
  written, then terminates the process with EXIT_FAILURE.
- Every other method returns None whether or not it wrote anything, so logging
  never alters the caller's control flow.
- Output goes to settings.console (the error stream) only; the primary output
  stream stays machine-parseable.

Line format
    2026-10-18 13:15:00 UTC [   notice] message

Multi-line messages are split and every line carries the full prefix, so
line-oriented consumers (grep, journald) never see an unprefixed fragment.
"""
import sys
from enum import IntEnum

from rich.text import Text

from .faults import EXIT_FAILURE
from .utils import interactive, timestamp


class Severity(IntEnum):
    """syslog priority ordering: lower is more severe."""
    EMERGENCY   = 0
    ALERT       = 1
    CRITICAL    = 2
    ERROR       = 3
    WARNING     = 4
    NOTICE      = 5
    INFO        = 6
    DEBUG       = 7


STYLES = {
    Severity.DEBUG: "magenta",
    Severity.INFO: "green",
    Severity.NOTICE: "blue",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
    Severity.CRITICAL: "bold red",
    Severity.ALERT: "bold white on red",
    Severity.EMERGENCY: "bold underline blink white on red",
}


def _render(key, value):
    value = str(value)
    if not value or any(char.isspace() for char in value):
        value = repr(value)
    return "%s=%s" % (key, value)


class Logger:
    """
    Leveled writer bound to one Settings instance.

    The threshold and color preference are read from the settings at every call,
    so reserved flags folded into the settings after parsing take effect at once.
    """
    __slots__ = ("_settings",)

    def __init__(self, settings, /):
        self._settings = settings

    @property
    def settings(self):
        return self._settings

    def enabled(self, severity, /):
        """Whether a record of the given severity would be written."""
        severity = Severity(severity)
        return severity is Severity.EMERGENCY or severity <= self._settings.verbosity

    def log(self, severity, /, *fragments, **context):
        """
        Write one record (one line per message line) if the threshold allows it.
        """
        severity = Severity(severity)
        if not self.enabled(severity):
            return None

        message = " ".join(map(str, fragments))
        if context:
            message = " ".join(filter(None, (message, *(_render(key, value) for key, value in context.items()))))

        console = self._settings.console
        colorful = self._settings.colorful and interactive(console)
        stamp = timestamp()
        tag = "[%9s]" % severity.name.lower()

        for line in message.split("\n"):
            console.print(
                Text.assemble(stamp, " ", (tag, STYLES[severity] if colorful else ""), " ", line),
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
        return None

    def emergency(self, *fragments, **context):
        """Always written; then the process exits with EXIT_FAILURE."""
        self.log(Severity.EMERGENCY, *fragments, **context)
        sys.exit(EXIT_FAILURE)

    def alert(self, *fragments, **context):
        return self.log(Severity.ALERT, *fragments, **context)

    def critical(self, *fragments, **context):
        return self.log(Severity.CRITICAL, *fragments, **context)

    def error(self, *fragments, **context):
        return self.log(Severity.ERROR, *fragments, **context)

    def warning(self, *fragments, **context):
        return self.log(Severity.WARNING, *fragments, **context)

    def notice(self, *fragments, **context):
        return self.log(Severity.NOTICE, *fragments, **context)

    def info(self, *fragments, **context):
        return self.log(Severity.INFO, *fragments, **context)

    def debug(self, *fragments, **context):
        return self.log(Severity.DEBUG, *fragments, **context)

    def echo(self, text, /):
        """
        Raw diagnostic line: no threshold, no timestamp, no color.

        Used by execution tracing, which is already opt-in.
        """
        self._settings.console.print(Text(str(text)), markup=False, highlight=False, soft_wrap=True)


__all__ = (
    "Severity",
    "STYLES",
    "Logger",
)
