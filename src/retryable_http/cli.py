"""
Command line entry point.

    retryable-http GET https://example.com --max-retries 3
    retryable-http POST https://example.com/upload --data @payload.json

Prints the response body to stdout and a one-line summary (status,
attempts, duration of the successful attempt) to stderr. Exits non-zero if
the call gives up.
"""

import argparse
import asyncio
import sys
from typing import Optional

import httpx
import structlog
from pydantic import ValidationError

from retryable_http.client import RetryableClient
from retryable_http.config import Settings
from retryable_http.context import (
    new_context,
    number_of_attempts_from_context,
    successful_request_duration_from_context,
)
from retryable_http.exceptions import RequestBodyError, RetryableError
from retryable_http.logging_config import configure_logging
from retryable_http.request import new_request
from retryable_http.transport.httpx_transport import HttpxTransport

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retryable-http",
        description="Send an HTTP request with backoff, 429 handling and bounded attempts.",
    )
    parser.add_argument("method", help="HTTP method, e.g. GET")
    parser.add_argument("url", help="Target URL")
    parser.add_argument(
        "-H", "--header", action="append", default=[], metavar="NAME:VALUE",
        help="Request header (repeatable)",
    )
    parser.add_argument(
        "-d", "--data", default=None,
        help="Request body, or @path to read it from a file",
    )
    parser.add_argument("--max-retries", type=int, default=None)
    parser.add_argument("--max-interval", type=float, default=None, help="seconds")
    parser.add_argument("--max-elapsed-time", type=float, default=None, help="seconds")
    parser.add_argument("--timeout", type=float, default=None, help="call deadline in seconds")
    parser.add_argument("--log-level", default=None)
    return parser


def parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header {value!r}, expected NAME:VALUE")
        headers[name.strip()] = content.strip()
    return headers


async def run(
    args: argparse.Namespace,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    headers = parse_headers(args.header)
    if args.data is not None and args.data.startswith("@"):
        try:
            body = open(args.data[1:], "rb")
        except OSError as e:
            raise RequestBodyError(f"Unable to open request body: {e}") from e
        with body:
            request = new_request(args.method, args.url, body, headers)
    else:
        request = new_request(args.method, args.url, args.data, headers)

    ctx = new_context(timeout=args.timeout)
    async with RetryableClient(settings, HttpxTransport(settings, transport=transport)) as client:
        try:
            response = await client.send(request, ctx)
        except RetryableError as e:
            status = e.response.status_code if e.response is not None else "-"
            print(
                f"error: {e.message} (status={status}, "
                f"attempts={number_of_attempts_from_context(ctx)})",
                file=sys.stderr,
            )
            return 1

    sys.stdout.write(response.text)
    duration = successful_request_duration_from_context(ctx) or 0.0
    print(
        f"{response.status_code} {response.reason_phrase} "
        f"attempts={number_of_attempts_from_context(ctx)} "
        f"duration_ms={int(duration * 1000)}",
        file=sys.stderr,
    )
    return 0


def main(
    argv: Optional[list[str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    args = build_parser().parse_args(argv)

    overrides = {
        "MAX_RETRIES": args.max_retries,
        "MAX_INTERVAL": args.max_interval,
        "MAX_ELAPSED_TIME": args.max_elapsed_time,
        "LOG_LEVEL": args.log_level,
    }
    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        print(f"error: invalid option: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)

    try:
        return asyncio.run(run(args, settings, transport))
    except (ValueError, httpx.InvalidURL, RequestBodyError) as e:
        logger.error("Invalid request", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
