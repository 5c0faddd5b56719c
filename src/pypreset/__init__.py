"""pypreset - Async engine applying parameter presets to browser tabs."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pypreset")
except PackageNotFoundError:
    __version__ = "0+local"
from pypreset.cdp import CdpBrowser
from pypreset.config import SyncConfig
from pypreset.exceptions import (
    PresetConfigError,
    PresetError,
    PresetNotFoundError,
    PresetScriptError,
    PresetTransportError,
)
from pypreset.manager import PresetManager
from pypreset.models import (
    Cookie,
    InjectionResult,
    Parameter,
    ParameterResult,
    ParameterType,
    Preset,
    PresetVerification,
    Tab,
    ToggleResult,
    VerificationResult,
)
from pypreset.repository import InMemoryPresetRepository, PresetRepository, TabStateRepository
from pypreset.synchronizer import PresetSynchronizer

__all__ = [
    "__version__",
    "CdpBrowser",
    "Cookie",
    "InMemoryPresetRepository",
    "InjectionResult",
    "Parameter",
    "ParameterResult",
    "ParameterType",
    "Preset",
    "PresetConfigError",
    "PresetError",
    "PresetManager",
    "PresetNotFoundError",
    "PresetRepository",
    "PresetScriptError",
    "PresetSynchronizer",
    "PresetTransportError",
    "PresetVerification",
    "SyncConfig",
    "Tab",
    "TabStateRepository",
    "ToggleResult",
    "VerificationResult",
]
