"""
Transport abstraction and implementations.

Components:
- BaseTransport: Abstract base class for transports
- HttpxTransport: Implementation over httpx.AsyncClient
- exceptions: Typed transport error categories
"""

from retryable_http.transport.base_transport import BaseTransport
from retryable_http.transport.httpx_transport import HttpxTransport
from retryable_http.transport.exceptions import (
    TooManyRedirectsError,
    TransportError,
    TransportTimeoutError,
    UntrustedCertificateError,
)

__all__ = [
    "BaseTransport",
    "HttpxTransport",
    "TransportError",
    "TransportTimeoutError",
    "TooManyRedirectsError",
    "UntrustedCertificateError",
]
