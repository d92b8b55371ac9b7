"""
Scaffold faults (configuration and usage errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- ScaffoldException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased and actionable way.
- ConfigurationError: the script's own documentation block or environment is unusable.
  Always fatal, always reported through the logger's emergency level.
- UsageError (+ subclasses): the caller passed bad arguments. Reported through help.
- UsageExit: every usage fault of one parse, plus the partial option map observed.

Exit statuses
- EXIT_FAILURE (1): emergency and configuration failures.
- EXIT_USAGE (64, sysexits EX_USAGE): help and usage errors, distinct from generic
  failures so scripted callers can detect bad usage deterministically.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, nullify

EXIT_FAILURE = 1
EXIT_USAGE = 64


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - configuration (2110x): the documentation block or the environment is unusable.
    - usage (2111x): the invocation arguments are unusable.

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- configuration errors (2110x) ---
    MISSING_DOCUMENTATION       = 21101
    MISSING_OPTIONS             = 21102
    MALFORMED_OPTION            = 21103
    DUPLICATED_FLAG             = 21104
    RESERVED_FLAG               = 21105
    CONFLICTING_MARKERS         = 21106
    BAD_ENVIRONMENT             = 21107

    # --- usage errors (2111x) ---
    UNKNOWN_SWITCH              = 21111
    MALFORMED_TOKEN             = 21112
    MISSING_VALUE               = 21113
    FLAG_ASSIGNMENT             = 21114
    MISSING_REQUIRED            = 21115


class ScaffoldException(Exception):
    """
    base fault: a lowercased message plus read-only rendering options.

    recognized options
    - code: FaultCode shown in the header.
    - title: short title shown in the header.
    - hint: one actionable sentence shown under the message.
    - prog: program name shown in the header.
    - colorful: whether styles are applied when rendered.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(nullify(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return nullify(self.message, "")

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title

            # body
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        code = self.code
        header = Text.assemble(
            "[ ",
            text(self.options.get("prog", "script"), "prog-name"),
            " — ",
            text(str(int(code)) if code is not None else "?", "code"),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), "title"),
            " ]"
        )
        renders = [header, text(self.message, "message")]
        if self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(self.options["hint"], "hint")))
        return Group(*renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(ScaffoldException): ...


class UsageError(ScaffoldException): ...
class UnknownSwitchError(UsageError): ...
class MalformedTokenError(UsageError): ...
class MissingValueError(UsageError): ...
class FlagAssignmentError(UsageError): ...
class MissingRequiredError(UsageError): ...


class UsageExit(ExceptionGroup):
    """
    every usage fault collected during one parse.

    `options` holds the partial option map observed before the faults were
    reported, so reserved flags (no-color, debug) still apply to the report.
    """

    def __new__(cls, exceptions, /, *, options=Unset):
        return super().__new__(cls, "bad usage", tuple(exceptions))

    def __init__(self, exceptions, /, *, options=Unset):
        super().__init__("bad usage", tuple(exceptions))
        self.options = nullify(options, MappingProxyType({}))

    def derive(self, exceptions):
        return type(self)(exceptions, options=self.options)


__all__ = (
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "FaultCode",
    "ScaffoldException",
    "ConfigurationError",
    "UsageError",
    "UnknownSwitchError",
    "MalformedTokenError",
    "MissingValueError",
    "FlagAssignmentError",
    "MissingRequiredError",
    "UsageExit",
)
