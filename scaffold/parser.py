"""
Scaffold argument parser: argv + OptionSpec table -> option map.

Forms (getopts compatible, plus GNU long options)
- `--long value`, `--long=value`
- `-s value`, `-svalue`
- bundled value-less shorts `-xxq`; a bundle may end in a value-taking short (`-xf a.txt`)
- `--` ends option processing; so does the first token that is not an option.
  Everything left over is exposed as Options.arguments.

Value shapes (decided by the OptionSpec, never by the input)
- value-taking, single: last occurrence wins (str).
- value-taking, repeatable: every value in occurrence order (list[str]).
- value-less, repeatable: occurrence counter (int).
- value-less, single: 1 once seen.
- absent: no entry, unless the OptionSpec declares a default (a one-element list for
  repeatable value-taking specs). Required specs never fall back to a default.

Faults
- Unknown, malformed and mis-valued tokens are collected while the whole command
  line is still consumed, so reserved flags are always observed; required specs are
  checked at the end. Any fault raises UsageExit carrying the partial map.
"""
import functools
import re
from collections import deque
from collections.abc import Mapping

from .faults import (
    FaultCode,
    FlagAssignmentError,
    MalformedTokenError,
    MissingRequiredError,
    MissingValueError,
    UnknownSwitchError,
    UsageExit,
)
from .utils import normalize

_LONG = re.compile(r"[^\W_](?:-?[^\W_])*")


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    if 1 <= number <= 10:
        return ("first", "second", "third", "fourth", "fifth",
                "sixth", "seventh", "eighth", "ninth", "tenth")[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class Options(Mapping):
    """
    Read-only result of one parse.

    Keys are OptionSpec.key (long form, else short form). Only observed or
    defaulted options are present. Compares equal to any mapping with the same
    items; leftover positional tokens live in `arguments`.
    """
    __slots__ = ("_values", "_arguments")

    def __init__(self, values=(), /, arguments=()):
        self._values = {key: list(value) if isinstance(value, list) else value for key, value in dict(values).items()}
        self._arguments = tuple(arguments)

    @property
    def arguments(self):
        return self._arguments

    def __getitem__(self, key, /):
        value = self._values[key]
        return list(value) if isinstance(value, list) else value

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return "%s(%r, arguments=%r)" % (type(self).__name__, self._values, self._arguments)


class _State:
    """Mutable bookkeeping of one parse (values, seen keys, faults)."""
    __slots__ = ("values", "seen", "faults", "index")

    def __init__(self):
        self.values = {}
        self.seen = set()
        self.faults = []
        self.index = 0

    def store(self, spec, value=None):
        key = spec.key
        self.seen.add(key)
        if spec.takes_value:
            if spec.repeatable:
                self.values.setdefault(key, []).append(value)
            else:
                self.values[key] = value
        elif spec.repeatable:
            self.values[key] = self.values.get(key, 0) + 1
        else:
            self.values[key] = 1


def _unknown(state, token):
    state.faults.append(UnknownSwitchError(
        "unknown option %r at %s position" % (token, _ordinal(state.index)),
        title="unknown option",
        code=FaultCode.UNKNOWN_SWITCH,
        input=token,
        index=state.index,
        hint="run with --help to see all available options",
    ))


def _missing(state, spec, token):
    state.seen.add(spec.key)
    state.faults.append(MissingValueError(
        "option %s at %s position requires an argument" % (spec.label, _ordinal(state.index)),
        title="missing value",
        code=FaultCode.MISSING_VALUE,
        input=token,
        index=state.index,
        hint="pass a value after it (for example: %s <%s>)" % (spec.names[-1], spec.metavar),
    ))


def _parse_long(state, token, tokens, longs):
    name, separator, inline = token[2:].partition("=")
    if not _LONG.fullmatch(name):
        state.faults.append(MalformedTokenError(
            "bad form of option %r at %s position" % (token, _ordinal(state.index)),
            title="malformed option",
            code=FaultCode.MALFORMED_TOKEN,
            input=token,
            index=state.index,
            hint="long options look like --name or --name=value",
        ))
        return
    spec = longs.get(normalize(name))
    if spec is None:
        return _unknown(state, "--" + name)

    if not spec.takes_value:
        if separator:
            state.seen.add(spec.key)
            state.faults.append(FlagAssignmentError(
                "flag %s at %s position cannot have a value" % (spec.label, _ordinal(state.index)),
                title="flag cannot take a value",
                code=FaultCode.FLAG_ASSIGNMENT,
                input=token,
                index=state.index,
                hint="remove everything from '=' (for example: --%s)" % name,
            ))
            return
        return state.store(spec)

    if separator:
        return state.store(spec, inline)
    if tokens:
        state.index += 1
        return state.store(spec, tokens.popleft())
    return _missing(state, spec, token)


def _parse_short(state, token, tokens, shorts):
    cluster = token[1:]
    for position, char in enumerate(cluster):
        spec = shorts.get(normalize(char))
        if spec is None:
            # the rest of the bundle cannot be interpreted reliably
            return _unknown(state, "-" + char)
        if not spec.takes_value:
            state.store(spec)
            continue
        if rest := cluster[position + 1:]:
            return state.store(spec, rest)
        if tokens:
            state.index += 1
            return state.store(spec, tokens.popleft())
        return _missing(state, spec, token)


def parse(argv, specs, /):
    """
    Parse argv against an ordered OptionSpec table.

    Parameters
    - argv: iterable of str (without the program name).
    - specs: iterable of OptionSpec; short/long forms must be unique.

    Returns
    - Options.

    Raises
    - TypeError: argv holds a non-string.
    - ValueError: specs declare the same flag or the same key twice.
    - UsageExit: one or more usage faults (carries the partial map).
    """
    specs = tuple(specs)
    shorts, longs, keys = {}, {}, set()
    for spec in specs:
        for name, table in ((spec.short, shorts), (spec.long, longs)):
            if name is None:
                continue
            if normalize(name) in table:
                raise ValueError("parse() flag %r is declared twice" % name)
            table[normalize(name)] = spec
        if normalize(spec.key) in keys:
            raise ValueError("parse() key %r is shared by two options" % spec.key)
        keys.add(normalize(spec.key))

    tokens = deque(argv)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("parse() first argument must be an iterable of strings")

    state = _State()
    while tokens:
        token = tokens.popleft()
        state.index += 1
        if token == "--":
            break
        if token.startswith("--"):
            _parse_long(state, token, tokens, longs)
        elif token.startswith("-") and len(token) > 1:
            _parse_short(state, token, tokens, shorts)
        else:
            tokens.appendleft(token)
            break

    for spec in specs:
        if spec.key in state.seen:
            continue
        if spec.required:
            state.faults.append(MissingRequiredError(
                "option %s is required" % spec.label,
                title="missing required option",
                code=FaultCode.MISSING_REQUIRED,
                input=spec.names[-1],
                hint="pass it as %s <%s>" % (spec.names[-1], spec.metavar),
            ))
        elif spec.default is not None:
            state.values[spec.key] = [spec.default] if spec.repeatable and spec.takes_value else spec.default

    options = Options(state.values, tokens)
    if state.faults:
        raise UsageExit(state.faults, options=options)
    return options


__all__ = (
    "Options",
    "parse",
)
