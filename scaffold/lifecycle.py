"""
Scaffold lifecycle manager: guaranteed exit actions and debug-mode failure reports.

Phases
- exit: one composite action (a contextlib.ExitStack) that runs exactly once when
  the managed block ends for any reason: normal completion, emergency (SystemExit),
  an uncaught exception, Ctrl-C (KeyboardInterrupt) or SIGTERM (turned into
  SystemExit(128 + signum) while the block is active). The scaffold registers its
  own cleanup trace first, so it always runs last; script bodies append work with
  defer()/enter() and can never remove it. Actions run in reverse registration order.

- error: only while settings.debug is set. On an uncaught exception it logs the
  failing function and line (innermost frame of the traceback) at error severity,
  then lets the exception propagate untouched; exit statuses are never rewritten.

Tracing
- trace(filename) switches on the Tracer for the rest of the block: line mode in
  debug mode, call mode in verbose mode. The exit phase switches it off first, so
  cleanup actions are never echoed.
"""
import signal
import threading
import traceback
from contextlib import ExitStack

from .tracing import Tracer


class Lifecycle:
    """
    Context manager owning the exit and error phases of one invocation.

    Usage
        with Lifecycle(settings, logger) as lifecycle:
            lifecycle.defer(os.remove, path)
            ...
    """
    __slots__ = ("_settings", "_logger", "_stack", "_tracer", "_entered", "_closed", "_handler")

    def __init__(self, settings, logger, /):
        self._settings = settings
        self._logger = logger
        self._stack = ExitStack()
        self._tracer = None
        self._entered = False
        self._closed = False
        self._handler = None

    @property
    def closed(self):
        return self._closed

    @property
    def tracer(self):
        return self._tracer

    def _cleanup(self):
        self._logger.info("cleaning up. done")

    def _terminate(self, signum, frame):
        raise SystemExit(128 + signum)

    def __enter__(self):
        if self._entered:
            raise RuntimeError("lifecycle can be entered only once")
        self._entered = True
        self._stack.callback(self._cleanup)
        if threading.current_thread() is threading.main_thread():
            previous = signal.signal(signal.SIGTERM, self._terminate)
            self._handler = previous if previous is not None else signal.SIG_DFL
        return self

    def defer(self, callback, /, *args, **kwargs):
        """Append an exit-phase action; returns the callback (usable as a decorator)."""
        if self._closed:
            raise RuntimeError("lifecycle is already closed")
        self._stack.callback(callback, *args, **kwargs)
        return callback

    def enter(self, manager, /):
        """Enter a context manager now and exit it during the exit phase."""
        if self._closed:
            raise RuntimeError("lifecycle is already closed")
        return self._stack.enter_context(manager)

    def trace(self, filename, /):
        """Enable execution tracing of `filename` according to the settings."""
        if self._tracer is not None:
            return self._tracer
        if self._settings.debug:
            mode = "line"
        elif self._settings.verbose:
            mode = "call"
        else:
            return None
        self._tracer = Tracer(self._logger, filename=filename, mode=mode).start()
        return self._tracer

    def report(self, exception, /):
        """Log the failing function and line of an exception (error phase)."""
        frames = traceback.extract_tb(exception.__traceback__)
        if frames:
            frame = frames[-1]
            self._logger.error("error in %s on line %s" % (frame.name, frame.lineno), file=frame.filename)
        self._logger.error("%s: %s" % (type(exception).__name__, exception))

    def close(self):
        """Run the exit phase; only the first call has any effect."""
        if self._closed:
            return
        self._closed = True
        if self._tracer is not None:
            self._tracer.stop()
        try:
            self._stack.close()
        finally:
            if self._handler is not None:
                signal.signal(signal.SIGTERM, self._handler)
                self._handler = None

    def __exit__(self, *exception):
        if self._tracer is not None:
            self._tracer.stop()
        if isinstance(exception[1], Exception) and self._settings.debug:
            self.report(exception[1])
        self.close()
        return False


__all__ = (
    "Lifecycle",
)
