"""Unit tests for request body decoding limits."""

from __future__ import annotations

from unittest import mock

import pytest

from dumont.api.errors import InvalidInputError
from dumont.api.requests import MAX_BODY_BYTES, CreateOrganization, decode_body


def _request(body: bytes, *, content_length: int | None) -> mock.Mock:
    """Build a request double whose stream honours the read size."""

    async def read(size: int | None = None) -> bytes:
        return body if size is None else body[:size]

    stream = mock.Mock()
    stream.read = mock.AsyncMock(side_effect=read)
    return mock.Mock(content_length=content_length, stream=stream)


class TestDecodeBody:
    """Tests for decode_body."""

    @pytest.mark.asyncio
    async def test_rejects_declared_oversize_body_without_reading(self) -> None:
        """A Content-Length over the limit is refused before the stream is read."""
        req = _request(b"{}", content_length=MAX_BODY_BYTES + 1)

        with pytest.raises(InvalidInputError, match="exceeds"):
            await decode_body(req, CreateOrganization)

        req.stream.read.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chunked_body_is_read_only_up_to_the_limit(self) -> None:
        """Bodies without a length stop one byte past the limit and are refused."""
        padding = b" " * (MAX_BODY_BYTES * 4)
        req = _request(b'{"org": "example"}' + padding, content_length=None)

        with pytest.raises(InvalidInputError, match="exceeds"):
            await decode_body(req, CreateOrganization)

        req.stream.read.assert_awaited_once_with(MAX_BODY_BYTES + 1)

    @pytest.mark.asyncio
    async def test_chunked_body_within_limit_decodes(self) -> None:
        """Small bodies without a length still decode normally."""
        req = _request(b'{"org": "example"}', content_length=None)

        body = await decode_body(req, CreateOrganization)

        assert body == CreateOrganization(org="example")
