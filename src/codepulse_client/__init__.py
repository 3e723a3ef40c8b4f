"""CodePulse Client - editor activity tracking through the WakaTime core tool."""

__version__ = "1.0.0"

from .config import PulseConfig, load_config  # noqa: E402
from .core import HeadlessEditor, PulseClient  # noqa: E402

__all__ = ["HeadlessEditor", "PulseClient", "PulseConfig", "load_config"]
