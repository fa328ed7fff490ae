"""
Unit tests for replayable request construction.
"""

import io

import httpx
import pytest

from retryable_http.exceptions import RequestBodyError
from retryable_http.request import RetryableRequest, new_request


class BrokenReader:
    """Readable that fails halfway through."""

    def read(self, *args):
        raise OSError("disk went away")


def test_bodiless_request():
    request = new_request("get", "http://example.com/items")

    assert request.method == "GET"
    assert request.url == httpx.URL("http://example.com/items")
    assert not request.has_body
    assert request.open_body() is None


def test_body_replayed_from_start_every_time():
    request = new_request("POST", "http://example.com", body=b"payload")

    first = request.open_body()
    first.read(3)

    assert request.open_body().read() == b"payload"
    assert first.read() == b"load"


def test_streams_are_independent():
    request = new_request("POST", "http://example.com", body=b"abc")

    streams = [request.open_body() for _ in range(3)]

    assert len({id(s) for s in streams}) == 3
    assert [s.read() for s in streams] == [b"abc"] * 3


@pytest.mark.parametrize(
    "body,expected",
    [
        (b"raw", b"raw"),
        (bytearray(b"array"), b"array"),
        (memoryview(b"view"), b"view"),
        ("héllo", "héllo".encode("utf-8")),
        (b"", b""),
    ],
)
def test_in_memory_bodies(body, expected):
    request = new_request("PUT", "http://example.com", body=body)

    assert request.has_body
    assert request.open_body().read() == expected


def test_file_like_body_read_once():
    source = io.BytesIO(b"from a stream")

    request = new_request("POST", "http://example.com", body=source)
    source.close()

    assert request.open_body().read() == b"from a stream"
    assert request.open_body().read() == b"from a stream"


def test_text_stream_body_encoded():
    request = new_request("POST", "http://example.com", body=io.StringIO("text stream"))

    assert request.open_body().read() == b"text stream"


def test_chunked_iterable_body():
    request = new_request("POST", "http://example.com", body=iter([b"a", b"b", b"c"]))

    assert request.open_body().read() == b"abc"
    assert request.open_body().read() == b"abc"


def test_unreadable_body_raises_io_error():
    with pytest.raises(RequestBodyError) as exc_info:
        new_request("POST", "http://example.com", body=BrokenReader())

    assert isinstance(exc_info.value, OSError)
    assert isinstance(exc_info.value.__cause__, OSError)
    assert "disk went away" in str(exc_info.value)


def test_closed_stream_raises_io_error():
    source = io.BytesIO(b"abc")
    source.close()

    with pytest.raises(RequestBodyError) as exc_info:
        new_request("POST", "http://example.com", body=source)

    assert isinstance(exc_info.value, OSError)
    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.parametrize(
    "chunks",
    [["text", b"bytes"], [b"ok", 3]],
    ids=["str-chunk", "int-chunk"],
)
def test_non_bytes_chunks_raise_io_error(chunks):
    with pytest.raises(RequestBodyError) as exc_info:
        new_request("POST", "http://example.com", body=iter(chunks))

    assert exc_info.value.details == {"error_type": "TypeError"}


def test_invalid_url_rejected():
    with pytest.raises(httpx.InvalidURL):
        new_request("GET", "http://example.com:notaport/")


def test_headers_copied():
    headers = {"Content-Type": "application/json"}

    request = new_request("POST", "http://example.com", body="{}", headers=headers)
    headers["Content-Type"] = "text/plain"

    assert request.headers == {"Content-Type": "application/json"}


def test_request_is_immutable():
    request = RetryableRequest(method="GET", url="http://example.com")

    with pytest.raises(AttributeError):
        request.method = "POST"
