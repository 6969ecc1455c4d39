__title__ = 'toolbind'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .multiplicity import *
from .parsers import *
from .models import *
from .processor import *
from .config import *
from .faults import *
from . import configfile, defaults

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
    "configfile",
    "defaults",
)

# Load the exposed API of the multiplicities
__all__ += multiplicity.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parsers
__all__ += parsers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the models
__all__ += models.__all__  # type: ignore[attr-defined]
# Load the exposed API of the processor
__all__ += processor.__all__  # type: ignore[attr-defined]
# Load the exposed API of the configuration store
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
