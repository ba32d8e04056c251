"""
declient runtime SDK.

Everything a generated client needs at run time: the ``DiscoveryAwareBase``
base class, the httpx-backed ``HttpClient`` and its configuration, the
``Out`` holder for response-header output parameters and the exception
hierarchy.

Example:
    >>> from declient_sdk import HttpClient, HttpClientConfig
    >>> client = HttpClient(HttpClientConfig(services={"users": "http://localhost:8000"}))
"""

from .base import DiscoveryAwareBase
from .client import HttpClient
from .config import HttpClientConfig
from .exceptions import (
    HeaderConversionError,
    ResponseDecodeError,
    ServiceClientError,
    ServiceConnectionError,
    ServiceError,
    ServiceServerError,
    ServiceStatusError,
    ServiceTimeoutError,
)
from .messages import Out, ServiceContent, ServiceRequest

__version__ = "0.1.0"

__all__ = [
    "DiscoveryAwareBase",
    "HeaderConversionError",
    "HttpClient",
    "HttpClientConfig",
    "Out",
    "ResponseDecodeError",
    "ServiceClientError",
    "ServiceConnectionError",
    "ServiceContent",
    "ServiceError",
    "ServiceRequest",
    "ServiceServerError",
    "ServiceStatusError",
    "ServiceTimeoutError",
]
