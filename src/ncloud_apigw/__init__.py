from __future__ import annotations

__all__ = [
    "__version__",
    "ApigwClient",
    "ClientConfig",
    "EndpointRegistry",
    "RawJSON",
    "TypedResponse",
    "clients",
    "errors",
    "models",
]

__version__ = "0.1.0"

from . import clients, errors, models  # noqa: E402
from .clients import ApigwClient  # noqa: E402
from .config import ClientConfig  # noqa: E402
from .models import TypedResponse  # noqa: E402
from .registry import EndpointRegistry  # noqa: E402
from .request import RawJSON  # noqa: E402
