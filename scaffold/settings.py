"""
Scaffold settings: the single, explicit run-time context of one invocation.

A Settings instance is built once at process start (from the environment) and
injected into the logger, the lifecycle manager and the tracer. Nothing in the
package keeps module-level mutable state; whatever changes during a run (the
reserved flags folded in after parsing) changes here and is seen by every
collaborator holding the same instance.

Environment
- LOG_LEVEL: verbosity threshold, integer 0 (emergency only) to 7 (debug). Default 6.
- NO_COLOR: any non-empty value other than "0"/"false"/"no"/"off" forces monochrome output.
- DEBUG: same truthiness rule; enables debug mode (verbosity 7, tracing, backtraces).

Reserved flags (see Settings.apply)
- -d/--debug, -v, -n/--no-color; -h/--help is handled by the script front-end.
"""
import os

from rich.console import Console

from .faults import ConfigurationError, FaultCode
from .utils import Unset, nullify

DEFAULT_VERBOSITY = 6
MAXIMUM_VERBOSITY = 7


def _truthy(value):
    return bool(value) and value.strip().lower() not in ("0", "false", "no", "off")


class Settings:
    """
    Run-time context shared by the logger, the lifecycle manager and the tracer.

    Attributes
    - verbosity: int in [0, 7]; records above it are dropped.
    - colorful: bool; color is applied only when also writing to a terminal.
    - debug: bool; error-phase backtraces and line tracing.
    - verbose: bool; call tracing.
    - console: rich Console bound to the error stream.
    """
    __slots__ = ("verbosity", "colorful", "debug", "verbose", "console", "_applied")

    def __init__(self, *, verbosity=DEFAULT_VERBOSITY, colorful=True, debug=False, verbose=False, console=Unset):
        if not isinstance(verbosity, int) or isinstance(verbosity, bool):
            raise TypeError("verbosity must be an integer")
        if not 0 <= verbosity <= MAXIMUM_VERBOSITY:
            raise ValueError("verbosity must be between 0 and %d" % MAXIMUM_VERBOSITY)
        self.verbosity = verbosity
        self.colorful = bool(colorful)
        self.debug = bool(debug)
        self.verbose = bool(verbose)
        self.console = console if console is not Unset else Console(stderr=True, highlight=False)
        self._applied = False
        if self.debug:
            self.verbosity = MAXIMUM_VERBOSITY

    @classmethod
    def from_environ(cls, environ=Unset, /, *, console=Unset):
        """
        Build settings from an environment mapping (os.environ by default).

        Raises
        - ConfigurationError: LOG_LEVEL is not an integer in [0, 7].
        """
        environ = nullify(environ, os.environ)

        raw = environ.get("LOG_LEVEL", "").strip()
        if not raw:
            verbosity = DEFAULT_VERBOSITY
        else:
            try:
                verbosity = int(raw)
            except ValueError:
                verbosity = -1
            if not 0 <= verbosity <= MAXIMUM_VERBOSITY:
                raise ConfigurationError(
                    "LOG_LEVEL must be an integer between 0 and %d, got %r" % (MAXIMUM_VERBOSITY, raw),
                    title="bad environment",
                    code=FaultCode.BAD_ENVIRONMENT,
                    hint="unset LOG_LEVEL or set it to a value from 0 (emergency) to 7 (debug)",
                )

        return cls(
            verbosity=verbosity,
            colorful=not _truthy(environ.get("NO_COLOR", "")),
            debug=_truthy(environ.get("DEBUG", "")),
            console=console,
        )

    def apply(self, options, /):
        """
        Fold the reserved flags of a parsed option map into these settings.

        Applied at most once per invocation; later calls are ignored so a partial
        map (from a failed parse) and the final one cannot both take effect.
        """
        if self._applied:
            return self
        self._applied = True
        if options.get("debug"):
            self.debug = True
            self.verbosity = MAXIMUM_VERBOSITY
        if options.get("v"):
            self.verbose = True
        if options.get("no-color"):
            self.colorful = False
        return self

    def __repr__(self):
        return "%s(verbosity=%d, colorful=%r, debug=%r, verbose=%r)" % (
            type(self).__name__, self.verbosity, self.colorful, self.debug, self.verbose
        )


__all__ = (
    "DEFAULT_VERBOSITY",
    "MAXIMUM_VERBOSITY",
    "Settings",
)
