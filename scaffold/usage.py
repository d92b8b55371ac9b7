r"""
Scaffold usage extractor: one documentation block, one option table.

Overview
- The script's module docstring is the single source of truth for its flags.
  extract(source) reads it (through ast, the module is never imported) and
  returns a Usage: free-form description, the ordered OptionSpec list, and the
  trailing help text. The same Usage feeds the argument parser and the help
  screen, so there is never a second flag table to keep in sync.

Documentation grammar
    '''
    Convert files between formats.

    Options:
      -f --file  [arg]  Filename to process. Required.
      -t --temp  [arg]  Location of tempfile. Default="/tmp/bar"
      -i --input [arg]  Input file. Can be repeated.
      -x                Increase the magic. Can be repeated.
      -q --quiet        Suppress chatter.
                        Indented lines continue the previous description.

    Anything after the section is help text, printed at the end of --help.
    '''

- The section starts at a line reading `Options:` and runs over the following
  indented (or blank) lines; the first non-indented line ends it.
- Option line: `[-s] [--long-name] [[metavar] | <metavar>] description`.
  • at least one of the short form (`-` + one letter or digit) and the long form
    (`--` + letters/digits joined by single hyphens) is required.
  • a metavar makes the option value-taking.
- Description markers
  • `Required.` at the end of the option line (or of one of its continuation
    lines) → the option must be given.
  • `Can be repeated.` → values accumulate (or occurrences are counted).
  • `Default="value"` / `Default=value` → value used when the option is absent.

Reserved flags
- -d/--debug, -v, -h/--help and -n/--no-color belong to the scaffold. They are
  always part of the table and may not be declared (or shadowed by an NFKC
  equivalent spelling) by a script.
- Every option stores its value under one key (long form, else short form), so
  two options may not share a key either: `--v` would land on the reserved `v`,
  and `-x` next to `--x` would both be `x`.

Failure
- A missing docstring, a missing or empty `Options:` section, a malformed option
  line, duplicated or reserved flags and contradictory markers raise
  ConfigurationError. The scaffold reports it through emergency before any
  argument is parsed.
"""
import ast
import io
import re
from collections import namedtuple

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .faults import ConfigurationError, FaultCode
from .utils import normalize

_SHORT = re.compile(r"-(?P<name>[^\W_])")
_LONG = re.compile(r"--(?P<name>[^\W_](?:-?[^\W_])*)")
_METAVAR = re.compile(r"\[(?P<bracket>[^\]\s]+)\]|<(?P<angle>[^>\s]+)>")
_TOKEN = re.compile(r"\S+")

_REQUIRED = re.compile(r"(?:^|\s)Required\.$")
_REPEATABLE = re.compile(r"(?:^|\s)Can be repeated\.")
_DEFAULT = re.compile(r"(?:^|\s)Default=(?:\"(?P<quoted>[^\"]*)\"|'(?P<single>[^']*)'|(?P<bare>\S+))")

_HEADER = "options:"


class OptionSpec(namedtuple("OptionSpec", (
    "short",
    "long",
    "metavar",
    "default",
    "repeatable",
    "required",
    "description",
), defaults=(None, None, None, None, False, False, ""))):
    """
    Declarative description of one command-line option.

    Fields
    - short: single-character short form without the dash, or None.
    - long: long form without the dashes, or None.
    - metavar: value placeholder name; present iff the option takes a value.
    - default: value used when the option is absent, or None.
    - repeatable: values accumulate (value-taking) or occurrences are counted (value-less).
    - required: the option must be given on the command line.
    - description: free text from the documentation block.
    """
    __slots__ = ()

    def __new__(cls, short=None, long=None, metavar=None, default=None, repeatable=False, required=False, description=""):
        if short is None and long is None:
            raise TypeError("OptionSpec() requires a short or a long form")
        return super().__new__(cls, short, long, metavar, default, bool(repeatable), bool(required), description)

    @property
    def takes_value(self):
        return self.metavar is not None

    @property
    def key(self):
        """Name of the entry in the parsed option map: the long form, else the short one."""
        return self.long if self.long is not None else self.short

    @property
    def names(self):
        """Command-line spellings, short first."""
        return tuple(name for name in (
            "-" + self.short if self.short is not None else None,
            "--" + self.long if self.long is not None else None,
        ) if name)

    @property
    def label(self):
        """Human-friendly `-f (--file)` label used in usage faults."""
        if self.short is not None and self.long is not None:
            return "-%s (--%s)" % (self.short, self.long)
        return self.names[0]


RESERVED = (
    OptionSpec("d", "debug", description="Enables debug mode"),
    OptionSpec("v", None, description="Enable verbose mode, print script as it is executed"),
    OptionSpec("h", "help", description="This page"),
    OptionSpec("n", "no-color", description="Disable color output"),
)


class Usage(namedtuple("Usage", ("description", "options", "helptext"))):
    """
    Extracted documentation: description, declared options, trailing help text.

    `specs` is what the parser consumes: the reserved options followed by the
    declared ones.
    """
    __slots__ = ()

    @property
    def reserved(self):
        return RESERVED

    @property
    def specs(self):
        return RESERVED + tuple(self.options)

    def _rows(self, specs):
        for spec in specs:
            short = "-" + spec.short if spec.short is not None else ""
            long = "--" + spec.long if spec.long is not None else ""
            names = ", ".join(filter(None, (short, long))) if short else "    " + long
            metavar = "[%s]" % spec.metavar if spec.takes_value else ""
            yield spec, names, metavar

    def render(self, prog, /, *, colorful=True):
        """
        Build the help screen as a rich renderable.

        Sections: usage line, description, declared options, reserved options,
        help text. When colorful is False no style is applied at all.
        """
        styles = {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "epilog-section": "#737373",
            "group-label": "bold #FFFFFF",
            "argument-description": "#9CA3AF",
            "option-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "metavar": "bold #FFD600",
        }

        def text(fragment, style=""):
            return Text(str(fragment), styles.get(style, "") if colorful else "")

        renders = [Text.assemble(
            text("usage: ", "usage-label"),
            text(prog, "program-name"),
            text(" [options] [--] [arguments ...]", "usage-section"),
        )]

        if self.description:
            renders.extend((Text(""), text(self.description, "description-section")))

        for label, specs in (("options:", self.options), ("reserved:", RESERVED)):
            table = Table.grid(padding=(0, 3))
            table.add_column(no_wrap=True)
            table.add_column()
            for spec, names, metavar in self._rows(specs):
                style = "option-name" if spec.takes_value else "flag-name"
                head = Text.assemble("  ", text(names, style))
                if metavar:
                    head.append(" ")
                    head.append_text(text(metavar, "metavar"))
                table.add_row(head, text(spec.description, "argument-description"))
            renders.extend((Text(""), text(label, "group-label"), table))

        if self.helptext:
            renders.extend((Text(""), text(self.helptext, "epilog-section")))

        return Group(*renders)

    def plain(self, prog, /, *, width=100):
        """The help screen as plain text (no styles, fixed width)."""
        console = Console(file=io.StringIO(), width=width, color_system=None, highlight=False)
        console.print(self.render(prog, colorful=False))
        return console.file.getvalue()


def _fault(message, code, hint, **options):
    return ConfigurationError(message, title=code.name.lower().replace("_", " "), code=code, hint=hint, **options)


def _docstring(source):
    if not isinstance(source, str):
        raise TypeError("extract() argument must be a string")
    try:
        module = ast.parse(source)
    except SyntaxError as exception:
        raise _fault(
            "script source cannot be parsed: %s" % exception.msg,
            FaultCode.MISSING_DOCUMENTATION,
            "fix the syntax error on line %s" % exception.lineno,
        ) from None
    docstring = ast.get_docstring(module, clean=True)
    if not docstring or not docstring.strip():
        raise _fault(
            "script has no documentation block",
            FaultCode.MISSING_DOCUMENTATION,
            "add a module docstring with an 'Options:' section at the top of the script",
        )
    # cleaning drops leading blank lines; line k of the result is source line offset + k
    node = module.body[0]
    raw = node.value.value.split("\n")
    leading = next(index for index, line in enumerate(raw) if line.strip())
    return docstring, node.lineno + leading - 1


def _split(docstring, offset):
    """Cut the docstring into (description lines, section lines with source line numbers, help text lines)."""
    lines = docstring.splitlines()
    try:
        start = next(index for index, line in enumerate(lines) if line.strip().lower() == _HEADER)
    except StopIteration:
        raise _fault(
            "documentation block has no 'Options:' section",
            FaultCode.MISSING_OPTIONS,
            "add an 'Options:' line followed by indented option lines",
        ) from None

    end = start + 1
    while end < len(lines) and (not lines[end].strip() or lines[end][:1].isspace()):
        end += 1

    section = [(offset + number + 1, lines[number]) for number in range(start + 1, end)]
    return lines[:start], section, lines[end:]


def _parse_line(number, line):
    """Parse one option line into (short, long, metavar, description)."""
    matches = list(_TOKEN.finditer(line))
    short = long = metavar = None
    description = ""

    for position, match in enumerate(matches):
        token = match[0]
        if token.startswith("-") and metavar is None:
            if (found := _LONG.fullmatch(token)) and long is None:
                long = found["name"]
                continue
            if (found := _SHORT.fullmatch(token)) and short is None and long is None:
                short = found["name"]
                continue
            raise _fault(
                "malformed option %r on line %d" % (token, number),
                FaultCode.MALFORMED_OPTION,
                "write options as '-s --long [arg]  description' (one short letter, one long name)",
                line=number,
            )
        if (found := _METAVAR.fullmatch(token)) and metavar is None and position in (1, 2) and (short or long):
            metavar = found["bracket"] or found["angle"]
            continue
        description = line[match.start():].strip()
        break

    return short, long, metavar, description


def _markers(number, short, long, metavar, lines):
    description = " ".join(lines)
    required = any(_REQUIRED.search(line) for line in lines)
    repeatable = bool(_REPEATABLE.search(description))
    default = None
    if found := _DEFAULT.search(description):
        default = next(value for value in (found["quoted"], found["single"], found["bare"]) if value is not None)

    label = "--" + long if long else "-" + short
    if metavar is None and (required or default is not None):
        raise _fault(
            "option %s on line %d takes no value but is marked %s" % (
                label, number, "required" if required else "with a default"
            ),
            FaultCode.CONFLICTING_MARKERS,
            "add a value placeholder such as [arg] or drop the marker",
            line=number,
        )
    return default, repeatable, required, description


def _check(specs):
    reserved_shorts = {normalize(spec.short) for spec in RESERVED if spec.short}
    reserved_longs = {normalize(spec.long) for spec in RESERVED if spec.long}
    reserved_keys = {normalize(spec.key) for spec in RESERVED}
    shorts, longs, keys = {}, {}, {}

    for number, spec in specs:
        for name, reserved, seen, dashes in (
                (spec.short, reserved_shorts, shorts, "-"),
                (spec.long, reserved_longs, longs, "--"),
        ):
            if name is None:
                continue
            identity = normalize(name)
            if identity in reserved:
                raise _fault(
                    "option %s%s on line %d collides with a reserved flag" % (dashes, name, number),
                    FaultCode.RESERVED_FLAG,
                    "-d/--debug, -v, -h/--help and -n/--no-color are provided by the scaffold; pick another name",
                    line=number,
                )
            if identity in seen:
                raise _fault(
                    "option %s%s on line %d was already declared on line %d" % (
                        dashes, name, number, seen[identity]
                    ),
                    FaultCode.DUPLICATED_FLAG,
                    "keep a single declaration per flag",
                    line=number,
                )
            seen[identity] = number

        # the option map holds one entry per key, whatever spelling produced it
        label = "--" + spec.long if spec.long is not None else "-" + spec.short
        identity = normalize(spec.key)
        if identity in reserved_keys:
            raise _fault(
                "option %s on line %d would be stored under the reserved key %r" % (label, number, spec.key),
                FaultCode.RESERVED_FLAG,
                "debug, v, help and no-color are keys of the scaffold's own flags; pick another name",
                line=number,
            )
        if identity in keys:
            raise _fault(
                "option %s on line %d would be stored under key %r, already used on line %d" % (
                    label, number, spec.key, keys[identity]
                ),
                FaultCode.DUPLICATED_FLAG,
                "give every option a distinct long name (or short letter when it has no long name)",
                line=number,
            )
        keys[identity] = number


def extract(source, /):
    """
    Parse a script's source text into a Usage.

    Pure and idempotent: equal sources always give equal results.

    Raises
    - TypeError: source is not a string.
    - ConfigurationError: missing/malformed documentation block.
    """
    docstring, offset = _docstring(source)
    description, section, helptext = _split(docstring, offset)

    entries = []
    for number, line in section:
        if not line.strip():
            continue
        if line.lstrip().startswith("-"):
            *head, text = _parse_line(number, line)
            entries.append([number, *head, [text] if text else []])
        elif entries:
            entries[-1][-1].append(line.strip())
        else:
            raise _fault(
                "unexpected text %r before the first option on line %d" % (line.strip(), number),
                FaultCode.MALFORMED_OPTION,
                "start the 'Options:' section with an option line",
                line=number,
            )

    if not entries:
        raise _fault(
            "the 'Options:' section declares no option",
            FaultCode.MISSING_OPTIONS,
            "list at least one option under 'Options:'",
        )

    specs = []
    for number, short, long, metavar, lines in entries:
        default, repeatable, required, text = _markers(number, short, long, metavar, lines)
        specs.append((number, OptionSpec(short, long, metavar, default, repeatable, required, text)))

    _check(specs)

    return Usage(
        "\n".join(description).strip(),
        tuple(spec for _, spec in specs),
        "\n".join(helptext).strip(),
    )


__all__ = (
    "OptionSpec",
    "RESERVED",
    "Usage",
    "extract",
)
