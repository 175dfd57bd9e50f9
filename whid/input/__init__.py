"""Input-layer public API: terminal key decoding and event routing."""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .mouse import handle_mouse
from .reader import ESC_SEQUENCE_TIMEOUT_MS, _PENDING_BYTES, read_key
from .router import InputRouter, RouterContext

__all__ = [
    "read_key",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "InputRouter",
    "RouterContext",
    "handle_mouse",
]
