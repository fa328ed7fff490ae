"""
Abstract base transport for retryable HTTP calls.

Defines the single capability the retry executor needs: send one request,
once, and return the response. This abstraction allows swapping the HTTP
stack (or a test double) without changing the retry policy.
"""

from abc import ABC, abstractmethod

import httpx
import structlog

from retryable_http.request import RetryableRequest


logger = structlog.get_logger(__name__)


class BaseTransport(ABC):
    """
    Abstract base class for transports.

    Responsibilities:
    - Send one request per call, reading the body from a fresh stream
    - Close each body stream after reading it
    - Raise TransportError subclasses on connection-level failures

    Does NOT handle:
    - Retrying (that's RetryExecutor's job)
    - Interpreting status codes (that's the outcome classifier's job)
    """

    @abstractmethod
    async def send(self, request: RetryableRequest) -> httpx.Response:
        """
        Send a single attempt of ``request``.

        Args:
            request: Request to send. ``request.open_body()`` must be called
                once per attempt to get an unread body.

        Returns:
            Response received, whatever its status code

        Raises:
            TooManyRedirectsError: Redirect limit exceeded
            UntrustedCertificateError: TLS certificate verification failed
            TransportTimeoutError: Attempt timed out
            TransportError: Any other connection-level failure
        """
        pass

    async def close(self):
        """
        Close transport connections and cleanup resources.

        Default implementation does nothing. Subclasses should override if
        they hold persistent connections.
        """
        logger.debug("Closing transport", transport_class=self.__class__.__name__)
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
