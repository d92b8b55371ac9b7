"""
Scaffold execution tracing: an opt-in instrumentation layer for script bodies.

Modes
- "line" (debug mode): every executed line of the script is echoed,
      + convert.py:42: total += len(chunk)
- "call" (verbose mode): every function entry of the script is echoed,
      + convert.py:17: load()

Only frames whose code lives in the traced file (the script's own source) are
reported; the scaffold, rich and the standard library never show up. Lines go
through Logger.echo, i.e. to the error stream, unthrottled by the verbosity
threshold: enabling a tracer is already the opt-in.
"""
import linecache
import os.path
import sys

_MODES = ("line", "call")


class Tracer:
    """
    Toggleable sys.settrace hook restricted to one source file.

    Usage
        tracer = Tracer(logger, filename=__file__, mode="line")
        with tracer:
            body()
    """
    __slots__ = ("_logger", "_filename", "_mode", "_previous", "_active")

    def __init__(self, logger, /, *, filename, mode="line"):
        if mode not in _MODES:
            raise ValueError("mode must be one of %s" % ", ".join(map(repr, _MODES)))
        if not isinstance(filename, str) or not filename:
            raise TypeError("filename must be a non-empty string")
        self._logger = logger
        self._filename = os.path.abspath(filename)
        self._mode = mode
        self._previous = None
        self._active = False

    @property
    def mode(self):
        return self._mode

    @property
    def filename(self):
        return self._filename

    @property
    def active(self):
        return self._active

    def _mine(self, frame):
        return os.path.abspath(frame.f_code.co_filename) == self._filename

    def _echo(self, frame, detail):
        self._logger.echo("+ %s:%d: %s" % (os.path.basename(self._filename), frame.f_lineno, detail))

    def _global(self, frame, event, argument):
        if event != "call" or not self._mine(frame):
            return None
        if self._mode == "call":
            self._echo(frame, "%s()" % frame.f_code.co_name)
            return None
        return self._local

    def _local(self, frame, event, argument):
        if event == "line":
            source = linecache.getline(self._filename, frame.f_lineno).strip()
            self._echo(frame, source)
        return self._local

    def start(self):
        """Begin tracing new frames; idempotent."""
        if self._active:
            return self
        self._previous = sys.gettrace()
        sys.settrace(self._global)
        self._active = True
        return self

    def stop(self):
        """Stop tracing and restore whatever hook was installed before; idempotent."""
        if not self._active:
            return self
        sys.settrace(self._previous)
        self._previous = None
        self._active = False
        return self

    def __enter__(self):
        return self.start()

    def __exit__(self, *exception):
        self.stop()
        return False

    def __repr__(self):
        return "%s(filename=%r, mode=%r, active=%r)" % (type(self).__name__, self._filename, self._mode, self._active)


__all__ = (
    "Tracer",
)
