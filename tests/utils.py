import sys
import zlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from asgi_content_encoding.types import ASGIApp, Message, Scope

try:
    import brotli  # noqa: F401

    BROTLI_AVAILABLE = True
except ImportError:
    BROTLI_AVAILABLE = False

requires_brotli = pytest.mark.skipif(
    not BROTLI_AVAILABLE, reason="brotli package not installed"
)


@asynccontextmanager
async def get_test_client(
    middleware: ASGIApp,
) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=middleware),
        base_url="http://test",
    ) as client:
        yield client


def unimport_module(monkeypatch: pytest.MonkeyPatch, module_name: str) -> None:
    # A None entry makes any later `import module_name` raise ImportError
    monkeypatch.setitem(sys.modules, module_name, None)


class MockSend:
    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def __call__(self, message: Message) -> None:
        self.messages.append(message)

    @property
    def start(self) -> Message:
        return self.messages[0]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start["headers"])

    @property
    def body(self) -> bytes:
        return b"".join(
            message.get("body", b"")
            for message in self.messages
            if message["type"] == "http.response.body"
        )


def make_scope(
    *headers: tuple[str, str], method: str = "GET", type: str = "http"
) -> Scope:
    return {
        "type": type,
        "method": method,
        "path": "/",
        "headers": [
            (key.encode("latin-1"), value.encode("latin-1"))
            for key, value in headers
        ],
    }


async def receive() -> Message:
    return {"type": "http.request", "body": b"", "more_body": False}


def make_app(
    *chunks: bytes,
    headers: Optional[list[tuple[str, str]]] = None,
    content_length: bool = False,
) -> ASGIApp:
    """Build an ASGI app sending ``chunks`` as one body message each."""
    raw_headers = [
        (key.encode("latin-1"), value.encode("latin-1"))
        for key, value in headers or [("content-type", "text/plain")]
    ]
    if content_length:
        length = sum(len(chunk) for chunk in chunks)
        raw_headers.append((b"content-length", str(length).encode()))

    async def app(scope: Scope, receive: Any, send: Any) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": 200,
                "headers": list(raw_headers),
            }
        )
        for i, chunk in enumerate(chunks):
            await send(
                {
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": i < len(chunks) - 1,
                }
            )

    return app


def decompress(encoding: str, data: bytes) -> bytes:
    if encoding == "gzip":
        return zlib.decompress(data, 16 + zlib.MAX_WBITS)
    elif encoding == "deflate":
        return zlib.decompress(data)
    elif encoding == "br":
        import brotli

        return brotli.decompress(data)
    else:
        assert False, f"Unexpected encoding: {encoding}"
