from .exceptions import (
    DomainError,
    ExplorerAPIError,
    RateLimitError,
    ServiceUnavailableError,
    TransportError,
)
from .rest_client import ExplorerRESTClient

__all__ = [
    "ExplorerRESTClient",
    "ExplorerAPIError",
    "TransportError",
    "ServiceUnavailableError",
    "DomainError",
    "RateLimitError",
]
