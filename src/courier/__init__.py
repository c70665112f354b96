"""courier: declarative HTTP request building on top of requests."""

from .log import setup_logging
from .networking import (
    HttpClient,
    HttpClientConfig,
    RequestBuilder,
    ResponseModel,
)

__version__ = "0.1.0"

__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "RequestBuilder",
    "ResponseModel",
    "__version__",
    "setup_logging",
]
