"""
Scaffold script layer: turn a documented callable into a complete command-line tool.

What this module provides
- Script: wraps a callback together with the source text that documents it and
  runs one invocation through the whole scaffold:
    1. settings from the environment (LOG_LEVEL, NO_COLOR, DEBUG)
    2. logger + lifecycle (exit phase armed before anything else can fail)
    3. usage extraction from the documentation block (once per Script)
    4. argument parsing; reserved flags folded into the settings first
    5. --help / usage faults → help on the error stream, exit EXIT_USAGE
    6. tracing per settings, debug banner, then the callback
- script(...): build a Script or return a decorator that builds one.
- invoke(object, prompt): run a Script (or a plain documented callable).

Quick start
    '''
    Count lines.

    Options:
      -f --file [arg]  File to read. Required.
      -x               Be extra careful. Can be repeated.
    '''
    from scaffold import script, invoke

    @script
    def main(options, log):
        log.info("reading", options["file"])
        with open(options["file"]) as stream:
            print(sum(1 for _ in stream))

    if __name__ == "__main__":
        invoke(main)

Callback parameters
- The callback receives, by name, whichever of these its signature asks for:
  options, arguments, log, lifecycle, settings, usage.
- An int return value becomes the exit status; None means success.
- Raising UsageError from the body is reported like a parse-time usage error.
"""
import inspect
import os.path
import shlex
import sys
from collections.abc import Iterable
from inspect import Parameter

from rich.text import Text

from .faults import EXIT_USAGE, ConfigurationError, FaultCode, UsageError, UsageExit
from .lifecycle import Lifecycle
from .logger import Logger
from .parser import parse
from .settings import Settings
from .usage import extract
from .utils import Unset, interactive, rename

_INJECTABLE = ("options", "arguments", "log", "lifecycle", "settings", "usage")


def _restyle(fault, /, **options):
    return fault.__replace__(**options)


class Script:
    """
    A callback plus the documentation block that defines its command line.

    Parameters
    - callback: the script body.
    - source: Unset | str; source text holding the documentation block. Defaults
      to the source of the module defining the callback.
    - prog: Unset | str; program name for help and faults (default: argv[0]).
    - environ: Unset | Mapping; environment to read settings from (default: os.environ).
    - console: Unset | rich Console; error-stream console (default: stderr).
    """
    __slots__ = ("_callback", "_source", "_prog", "_environ", "_console", "_usage", "_settings")

    def __init__(self, callback, /, *, source=Unset, prog=Unset, environ=Unset, console=Unset):
        if not callable(callback):
            raise TypeError("Script() first argument must be callable")
        if not isinstance(source, str | Unset):
            raise TypeError("source must be a string")
        if not isinstance(prog, str | Unset):
            raise TypeError("prog must be a string")

        for name, parameter in inspect.signature(callback).parameters.items():
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            if name not in _INJECTABLE and parameter.default is Parameter.empty:
                raise TypeError("script parameter %r is not one of %s" % (name, ", ".join(_INJECTABLE)))

        self._callback = callback
        self._source = source
        self._prog = prog
        self._environ = environ
        self._console = console
        self._usage = Unset
        self._settings = Unset

    @property
    def callback(self):
        return self._callback

    @property
    def prog(self):
        if self._prog is not Unset:
            return self._prog
        if sys.argv and sys.argv[0] and sys.argv[0] != "-c":
            return os.path.basename(sys.argv[0])
        return self._callback.__name__

    @property
    def filename(self):
        """Source file of the callback (what tracing follows), or None."""
        try:
            return inspect.getsourcefile(self._callback)
        except TypeError:
            return None

    @property
    def source(self):
        if self._source is not Unset:
            return self._source
        try:
            return inspect.getsource(inspect.getmodule(self._callback))
        except (OSError, TypeError):
            raise ConfigurationError(
                "source of %r is not available" % self._callback.__name__,
                title="missing documentation",
                code=FaultCode.MISSING_DOCUMENTATION,
                hint="run the script from a file or pass its source text explicitly",
            ) from None

    @property
    def usage(self):
        """The extracted documentation (parsed once, then cached)."""
        if self._usage is Unset:
            self._usage = extract(self.source)
        return self._usage

    def help(self, message=Unset, /, *, faults=(), settings=Unset):
        """
        Print the optional message, the faults and the help screen to the error
        stream, then exit with EXIT_USAGE.
        """
        if settings is Unset:
            settings = self._settings
        if settings is Unset:
            settings = Settings(console=self._console)
        console = settings.console
        colorful = settings.colorful and interactive(console)

        if message is not Unset:
            console.print(Text(str(message)), markup=False, highlight=False)
            console.print()
        for fault in faults:
            console.print(_restyle(fault, prog=self.prog, colorful=colorful))
            console.print()
        console.print(self.usage.render(self.prog, colorful=colorful))
        sys.exit(EXIT_USAGE)

    def _arguments(self, available):
        args = []
        kwargs = {}
        for name, parameter in inspect.signature(self._callback).parameters.items():
            if parameter.kind is Parameter.VAR_KEYWORD:
                kwargs.update((key, value) for key, value in available.items() if key not in kwargs)
            elif name not in available or parameter.kind is Parameter.VAR_POSITIONAL:
                continue
            elif parameter.kind is Parameter.POSITIONAL_ONLY:
                args.append(available[name])
            else:
                kwargs[name] = available[name]
        return args, kwargs

    def _fatal(self, logger, fault):
        hint = fault.options.get("hint")
        logger.emergency(fault.message + ("\n" + hint if hint else ""), code=int(fault.code))

    def __invoke__(self, prompt=Unset):
        """
        Run one invocation with a token stream.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            settings, fault = Settings.from_environ(self._environ, console=self._console), None
        except ConfigurationError as exception:
            settings, fault = Settings(console=self._console), exception
        logger = Logger(settings)
        self._settings = settings

        try:
            with Lifecycle(settings, logger) as lifecycle:
                if fault is not None:
                    self._fatal(logger, fault)
                try:
                    usage = self.usage
                except ConfigurationError as exception:
                    self._fatal(logger, exception)

                try:
                    options = parse(tokens, usage.specs)
                except UsageExit as group:
                    settings.apply(group.options)
                    if group.options.get("help"):
                        self.help(settings=settings)
                    self.help(faults=group.exceptions, settings=settings)

                settings.apply(options)
                if options.get("help"):
                    self.help(settings=settings)

                if filename := self.filename:
                    lifecycle.trace(filename)
                logger.debug("invocation:", shlex.join([self.prog, *tokens]))
                logger.debug("settings:", settings)
                logger.debug("options:", dict(options), arguments=shlex.join(options.arguments))

                args, kwargs = self._arguments({
                    "options": options,
                    "arguments": options.arguments,
                    "log": logger,
                    "lifecycle": lifecycle,
                    "settings": settings,
                    "usage": usage,
                })
                try:
                    status = self._callback(*args, **kwargs)
                except UsageError as exception:
                    self.help(faults=(exception,), settings=settings)

                if isinstance(status, int) and not isinstance(status, bool) and status:
                    sys.exit(status)
        finally:
            self._settings = Unset

    def __call__(self, prompt=Unset, /):
        return self.__invoke__(prompt)

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self._callback.__qualname__)


def script(source=Unset, /, **options):
    """
    Create a Script or return a decorator to build it later.

    Invocation modes
    - Direct:     main = script(body, prog="convert")
    - Decorator:  @script(prog="convert")  /  @script
    """
    @rename("script")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@script() must be applied to a callable")
        return Script(callback, **options)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Run a Script (or a documented plain callable) with a token stream.

    Raises
    - TypeError: when object cannot be invoked or prompt has an invalid type.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    if callable(object):
        return invoke(Script(object), prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Script",
    "script",
    "invoke",
)
