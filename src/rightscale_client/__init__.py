"""High-level RightScale client entrypoints."""
from .client import RightScaleClient
from .config import CLIENT_VERSION as __version__
from .config import ClientConfig
from .dump import DumpFormat
from .exceptions import RightScaleError

__all__ = ["RightScaleClient", "ClientConfig", "DumpFormat", "RightScaleError", "__version__"]
