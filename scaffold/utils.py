"""
Scaffold utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the logger, the usage extractor, the parser
  and the lifecycle manager.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- nullify(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- timestamp(moment=Unset)
  • ISO-8601-like UTC stamp with second precision, used by every log line.

- interactive(console)
  • Whether a rich console writes to a terminal (color is only applied then).

- normalize(flag)
  • NFKC-normalized spelling of a flag; every flag identity comparison goes through it.
"""
import builtins
import datetime
import functools
import unicodedata
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


def nullify(object, default=None, /):
    """
    Return `default` when `object` is Unset; otherwise return `object` unchanged.

    None and other falsey values are preserved, only the sentinel is replaced.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def timestamp(moment=Unset, /):
    """
    Format a moment as `YYYY-MM-DD HH:MM:SS UTC` (second precision).

    Parameters
    - moment: Unset | datetime
      • Unset: the current time.
      • naive datetimes are taken as UTC; aware ones are converted to UTC.
    """
    if moment is Unset:
        moment = datetime.datetime.now(datetime.timezone.utc)
    elif not isinstance(moment, datetime.datetime):
        raise TypeError("timestamp() argument must be a datetime")
    elif moment.tzinfo is not None:
        moment = moment.astimezone(datetime.timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def interactive(console, /):
    """
    Whether the given rich console writes to an interactive terminal.

    Rich already honors FORCE_COLOR/TTY detection for the underlying file; this
    only reads the verdict so callers do not reach into console internals.
    """
    return bool(console.is_terminal)


@functools.cache
def normalize(flag, /):
    """
    Return the NFKC-normalized spelling of a flag.

    Compatibility forms (full-width hyphens and letters, ligatures, ...) collapse
    onto their canonical spelling, so two declarations that look different in the
    source but are typed the same way on a terminal are caught as the same flag.
    """
    if not isinstance(flag, str):
        raise TypeError("normalize() argument must be a string")
    return unicodedata.normalize("NFKC", flag)


__all__ = (
    # Functions
    "nullify",
    "rename",
    "timestamp",
    "interactive",
    "normalize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
