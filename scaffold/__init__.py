__title__ = 'scaffold'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from . import faults, lifecycle, logger, parser, scripts, settings, tracing, usage
from .faults import *
from .lifecycle import *
from .logger import *
from .parser import *
from .scripts import *
from .settings import *
from .tracing import *
from .usage import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of every layer, leaf-first
__all__ += faults.__all__
__all__ += settings.__all__
__all__ += logger.__all__
__all__ += usage.__all__
__all__ += parser.__all__
__all__ += tracing.__all__
__all__ += lifecycle.__all__
__all__ += scripts.__all__
