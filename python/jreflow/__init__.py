from importlib.metadata import PackageNotFoundError, version

from jreflow.errors import AstMismatchError, FormatterCommandError, ParseError, ReflowError
from jreflow.formatter import CommandFormatter, NoopFormatter
from jreflow.models import DEFAULT_COLUMN_LIMIT, WrapOptions
from jreflow.wrapper import wrap

try:
    __version__ = version("jreflow")
except PackageNotFoundError:
    # Running from a source checkout without an installed distribution.
    __version__ = "0.0.0-dev"

__all__ = [
    "wrap",
    "WrapOptions",
    "DEFAULT_COLUMN_LIMIT",
    "NoopFormatter",
    "CommandFormatter",
    "ReflowError",
    "ParseError",
    "AstMismatchError",
    "FormatterCommandError",
    "__version__",
]
