from ._version import version as __version__, version_tuple
from .univariate.base import garch_model
from .utility import test

__all__ = ["__version__", "garch_model", "test", "version_tuple"]
