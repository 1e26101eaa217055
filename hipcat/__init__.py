"""
hipcat - cat for HipChat rooms.

Relays text to a HipChat v2 room:
- Configuration layered from /etc, home and current-directory files,
  then environment variables, then the -r/--room flag
- One POST per message, fail-fast, no retries
- Only dependencies are requests and loguru

Basic usage:
    from hipcat import ConfigResolver, HipcatNotifier

    cfg = ConfigResolver().resolve().with_room("devs").require_room()
    with HipcatNotifier(cfg) as hn:
        hn.send_text("Hello from Python!")
"""

__version__ = "0.1.0"

from .hipcatConfig import (
    ConfigResolver,
    HipcatConfig,
    HipcatError,
    ConfigFileError,
    ConfigMissingFieldError,
)
from .hipcatNotifier import (
    HipcatNotifier,
    RoomMessage,
    DeliveryOutcome,
    SerializationError,
    TransportError,
    ProtocolError,
)
from .cli import InputReadError

__all__ = [
    "ConfigResolver",
    "HipcatConfig",
    "HipcatNotifier",
    "RoomMessage",
    "DeliveryOutcome",
    "HipcatError",
    "ConfigFileError",
    "ConfigMissingFieldError",
    "SerializationError",
    "TransportError",
    "ProtocolError",
    "InputReadError",
    "__version__",
]
