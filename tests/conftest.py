from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, StreamingResponse
from starlette.routing import Route

from asgi_content_encoding.middleware import CompressionMiddleware
from asgi_content_encoding.types import ASGIApp

from .utils import get_test_client


def get_starlette_app() -> ASGIApp:
    def homepage(_: Request) -> PlainTextResponse:
        return PlainTextResponse("x" * 4000)

    def small_response(_: Request) -> PlainTextResponse:
        return PlainTextResponse("Hello world!")

    def at_threshold(_: Request) -> PlainTextResponse:
        return PlainTextResponse("x" * 1024)

    def below_threshold(_: Request) -> PlainTextResponse:
        return PlainTextResponse("x" * 1023)

    def streaming_response(_: Request) -> StreamingResponse:
        async def generator(
            bytes: bytes,
            count: int,
        ) -> AsyncGenerator[bytes, None]:
            for _ in range(count):
                yield bytes

        streaming = generator(bytes=b"x" * 400, count=10)
        return StreamingResponse(streaming, status_code=200)

    def streaming_response_with_content_encoding(
        _: Request,
    ) -> StreamingResponse:
        async def generator(
            bytes: bytes,
            count: int,
        ) -> AsyncGenerator[bytes, None]:
            for _ in range(count):
                yield bytes

        streaming = generator(bytes=b"x" * 400, count=10)
        return StreamingResponse(
            streaming,
            status_code=200,
            headers={"Content-Encoding": "text"},
        )

    def no_transform(_: Request) -> PlainTextResponse:
        return PlainTextResponse(
            "x" * 4000, headers={"Cache-Control": "public, no-transform"}
        )

    def identity_encoded(_: Request) -> PlainTextResponse:
        return PlainTextResponse(
            "x" * 4000, headers={"Content-Encoding": "identity"}
        )

    def with_vary(_: Request) -> PlainTextResponse:
        return PlainTextResponse("x" * 4000, headers={"Vary": "Cookie"})

    return Starlette(
        routes=[
            Route("/", endpoint=homepage),
            Route("/small_response", endpoint=small_response),
            Route("/at_threshold", endpoint=at_threshold),
            Route("/below_threshold", endpoint=below_threshold),
            Route("/streaming_response", endpoint=streaming_response),
            Route(
                "/streaming_response_with_content_encoding",
                endpoint=streaming_response_with_content_encoding,
            ),
            Route("/no_transform", endpoint=no_transform),
            Route("/identity_encoded", endpoint=identity_encoded),
            Route("/with_vary", endpoint=with_vary),
        ]
    )


@pytest.fixture
def app() -> ASGIApp:
    return get_starlette_app()


@pytest_asyncio.fixture
async def client(app: ASGIApp) -> AsyncGenerator[AsyncClient, None]:
    middleware = CompressionMiddleware(app=app)

    async with get_test_client(middleware) as client:
        yield client
