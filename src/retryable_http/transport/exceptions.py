"""
Custom exceptions for the transport layer.

Transports raise these typed categories so that the outcome classifier can
tell unrecoverable connection failures (redirect loops, untrusted
certificates) apart from ordinary network blips without inspecting error
messages.
"""


class TransportError(Exception):
    """
    Base exception for all transport failures.

    Any TransportError not covered by a more specific subclass is treated
    as transient and retried (connection resets, DNS failures, etc.).
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportTimeoutError(TransportError):
    """
    Raised when a single attempt exceeds the transport timeout.

    Transient: the next attempt gets a fresh timeout.
    """
    pass


class TooManyRedirectsError(TransportError):
    """
    Raised when the server redirects more than MAX_REDIRECTS times.

    Permanent: a redirect loop does not fix itself on retry.
    """
    pass


class UntrustedCertificateError(TransportError):
    """
    Raised when the server presents a certificate that fails verification.

    Permanent: retrying cannot make an untrusted certificate trusted.
    """
    pass
