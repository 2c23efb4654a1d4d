from .base import HttpTransport, Transport
from .gateway import ApigwClient

__all__ = [
    "ApigwClient",
    "HttpTransport",
    "Transport",
]
