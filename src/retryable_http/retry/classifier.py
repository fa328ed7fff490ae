"""
Outcome classification for a single attempt.

Turns the raw result of one transport call (a response, or the exception
the transport raised) into one of four outcomes:

    SUCCESS            2xx response
    PERMANENT_FAILURE  redirect loop, untrusted certificate, 4xx except 429
    TRANSIENT_FAILURE  any other transport error, 5xx, other non-2xx
    RATE_LIMITED       429, with an optional Retry-After wait hint

Classification is a pure function of its inputs; it holds no state.
"""

import re
import ssl
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from retryable_http.exceptions import MalformedRetryAfterError
from retryable_http.transport.exceptions import (
    TooManyRedirectsError,
    UntrustedCertificateError,
)

# Compatibility shim for transports that only raise untyped errors: typed
# categories are checked first, these message patterns only as a fallback.
REDIRECT_ERROR_PATTERN = re.compile(
    r"stopped after \d+ redirects|exceeded maximum allowed redirects",
    re.IGNORECASE,
)
UNTRUSTED_CERT_ERROR_PATTERN = re.compile(
    r"certificate is not trusted|certificate verify failed",
    re.IGNORECASE,
)

_DELTA_SECONDS = re.compile(r"^[0-9]+$")

# Longest wait honoured from Retry-After (about 68 years); larger values are clamped
MAX_RETRY_AFTER_SECONDS = 2**31 - 1


class OutcomeKind(str, Enum):
    """Closed set of attempt outcomes."""

    SUCCESS = "success"
    PERMANENT_FAILURE = "permanent_failure"
    TRANSIENT_FAILURE = "transient_failure"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class Outcome:
    """
    Classified result of one attempt.

    Attributes:
        kind: Outcome category
        reason: Human readable reason (status line or error message)
        response: Response received, if any
        error: Transport exception raised, if any
        wait_hint: Server supplied wait in seconds (RATE_LIMITED only;
            None means "use the default")
    """

    kind: OutcomeKind
    reason: str
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None
    wait_hint: Optional[float] = None

    @property
    def retryable(self) -> bool:
        return self.kind in (OutcomeKind.TRANSIENT_FAILURE, OutcomeKind.RATE_LIMITED)


def classify(
    error: Optional[BaseException],
    response: Optional[httpx.Response],
) -> Outcome:
    """
    Classify one attempt.

    Args:
        error: Exception raised by the transport, or None
        response: Response returned by the transport, or None

    Returns:
        Outcome for the attempt

    Raises:
        MalformedRetryAfterError: A 429 carried a Retry-After that is not a
            non-negative integer count of seconds
    """
    if error is not None:
        reason = str(error) or type(error).__name__
        if is_redirect_error(error) or is_untrusted_certificate_error(error):
            return Outcome(OutcomeKind.PERMANENT_FAILURE, reason, response=response, error=error)
        return Outcome(OutcomeKind.TRANSIENT_FAILURE, reason, response=response, error=error)

    if response is None:
        raise ValueError("classify() needs either an error or a response")

    status = response.status_code
    reason = _status_line(response)

    if status == 429:
        wait_hint = parse_retry_after(response.headers.get("Retry-After"), response=response)
        return Outcome(OutcomeKind.RATE_LIMITED, reason, response=response, wait_hint=wait_hint)

    if 400 <= status < 500:
        return Outcome(OutcomeKind.PERMANENT_FAILURE, reason, response=response)

    if not 200 <= status < 300:
        return Outcome(OutcomeKind.TRANSIENT_FAILURE, reason, response=response)

    return Outcome(OutcomeKind.SUCCESS, reason, response=response)


def parse_retry_after(
    value: Optional[str],
    response: Optional[httpx.Response] = None,
) -> Optional[float]:
    """
    Parse a Retry-After header as delta-seconds.

    Returns None for a missing or empty header. HTTP-date values are not
    supported and count as malformed. Values above MAX_RETRY_AFTER_SECONDS
    are clamped to it.

    Raises:
        MalformedRetryAfterError: Value is not a non-negative integer
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _DELTA_SECONDS.match(value):
        raise MalformedRetryAfterError(value, response=response)
    digits = value.lstrip("0") or "0"
    if len(digits) > len(str(MAX_RETRY_AFTER_SECONDS)):
        return float(MAX_RETRY_AFTER_SECONDS)
    return float(min(int(digits), MAX_RETRY_AFTER_SECONDS))


def is_redirect_error(error: BaseException) -> bool:
    if _caused_by(error, (TooManyRedirectsError, httpx.TooManyRedirects)):
        return True
    return bool(REDIRECT_ERROR_PATTERN.search(str(error)))


def is_untrusted_certificate_error(error: BaseException) -> bool:
    if _caused_by(error, (UntrustedCertificateError, ssl.SSLCertVerificationError)):
        return True
    return bool(UNTRUSTED_CERT_ERROR_PATTERN.search(str(error)))


def _status_line(response: httpx.Response) -> str:
    if response.reason_phrase:
        return f"{response.status_code} {response.reason_phrase}"
    return str(response.status_code)


def _caused_by(error: BaseException, types: tuple[type[BaseException], ...]) -> bool:
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if isinstance(current, types):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False
