"""tenkiconv: translation converter for game scene scripts.

A scene script (``.txt``, code page 932) and its binary section files
(``.spt``) are turned into a placeholder script plus a CSV sheet of
dialogue, and a translated sheet is injected back with every section
record's line bookkeeping recomputed.
"""

__version__ = "0.1.0"

from .api.convert import (  # noqa: E402
    BatchConversionResult,
    ConversionResult,
    Direction,
    ScriptConverter,
)
from .config import TenkiConvSettings, get_settings  # noqa: E402
from .exceptions import TenkiConvError  # noqa: E402

__all__ = [
    "BatchConversionResult",
    "ConversionResult",
    "Direction",
    "ScriptConverter",
    "TenkiConvError",
    "TenkiConvSettings",
    "__version__",
    "get_settings",
]
