import logging
import typing
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Tuple

from .base import CompressionAlgorithm, ContentEncoding, StreamEncoder
from .headers import (
    EncodingPreference,
    parse_cache_control,
    parse_content_encoding,
    parse_content_length,
)
from .negotiation import select_encoding
from .types import ASGIApp, Headers, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


async def unattached_send(message: Message) -> typing.NoReturn:
    raise RuntimeError("send awaitable not set")  # pragma: no cover


@dataclass
class ResponseEncodingState:
    """What the pipeline knows about one response while it decides."""

    headers: Headers
    body_length: Optional[int] = None

    def known_length(self) -> Optional[int]:
        """Body length from Content-Length, else the buffered body, if any."""
        content_length = self.headers.get_combined("content-length")
        if content_length is not None:
            return parse_content_length(content_length)
        return self.body_length


Step = Callable[[ResponseEncodingState], bool]

# Extensions that hand the body to the server, bypassing body messages
BODY_EXTENSIONS = ("http.response.pathsend", "http.response.zerocopysend")


def without_body_extensions(scope: Scope) -> Scope:
    extensions = scope.get("extensions")
    if not extensions or not any(name in extensions for name in BODY_EXTENSIONS):
        return scope

    scope = dict(scope)
    scope["extensions"] = {
        name: value
        for name, value in extensions.items()
        if name not in BODY_EXTENSIONS
    }
    return scope


class CompressionResponder:
    """
    Negotiates and applies compression for a single response.

    ``http.response.start`` is held back until the decision can be made:
    right away when it carries a Content-Length, otherwise at the first
    body message. The decision is an ordered series of steps; each returns
    ``False`` to leave the response as it is from that point on.
    """

    def __init__(
        self,
        app: ASGIApp,
        accepted: List[EncodingPreference],
        algorithms: Mapping[ContentEncoding, CompressionAlgorithm],
        threshold: int,
    ) -> None:
        self.app = app
        self.accepted = accepted
        self.algorithms = algorithms
        self.threshold = threshold
        self.encoder: Optional[StreamEncoder] = None
        self._send: Send = unattached_send
        self._initial_message: Message = {}
        self._headers: Optional[Headers] = None
        self._started = False
        self.steps: Tuple[Step, ...] = (
            self.check_no_transform,
            self.add_vary,
            self.check_existing_encoding,
            self.check_threshold,
            self.select_encoder,
        )

    async def __call__(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        self._send = send
        try:
            await self.app(
                without_body_extensions(scope), receive, self.send_with_compression
            )
        finally:
            # Client went away, the app failed, or the body is complete
            if self.encoder is not None:
                self.encoder.close()

    async def send_with_compression(self, message: Message) -> None:
        message_type = message["type"]
        if message_type == "http.response.start":
            self._initial_message = message
            self._headers = Headers(raw=message.get("headers", []))

            if "content-length" in self._headers:
                await self.start(None)

        elif message_type == "http.response.body":
            body = message.get("body", b"")
            more_body = message.get("more_body", False)

            if not self._started:
                await self.start(None if more_body else len(body))

            if self.encoder is not None:
                compressed = self.encoder.compress(body)
                if not more_body:
                    compressed += self.encoder.flush()
                message["body"] = compressed

            await self._send(message)

        else:
            await self._send(message)

    async def start(self, body_length: Optional[int]) -> None:
        assert self._headers is not None, "http.response.start not received"
        state = ResponseEncodingState(self._headers, body_length)
        self.negotiate(state)
        self._started = True

        self._initial_message["headers"] = state.headers.encode()
        await self._send(self._initial_message)

    def negotiate(self, state: ResponseEncodingState) -> None:
        for step in self.steps:
            if not step(state):
                return

    def check_no_transform(self, state: ResponseEncodingState) -> bool:
        cache_control = state.headers.get_combined("cache-control")
        if cache_control is None:
            return True

        # https://www.rfc-editor.org/rfc/rfc9111#section-5.2.2.6
        if "no-transform" in parse_cache_control(cache_control):
            logger.debug("Not compressing: Cache-Control no-transform")
            return False
        return True

    def add_vary(self, state: ResponseEncodingState) -> bool:
        state.headers.add_vary_header("Accept-Encoding")
        return True

    def check_existing_encoding(self, state: ResponseEncodingState) -> bool:
        content_encoding = state.headers.get_combined("content-encoding")
        if content_encoding is None:
            return True

        codings = parse_content_encoding(content_encoding)
        if any(coding != ContentEncoding.IDENTITY.value for coding in codings):
            logger.debug("Not compressing: already encoded as %s", content_encoding)
            return False
        return True

    def check_threshold(self, state: ResponseEncodingState) -> bool:
        body_length = state.known_length()
        if body_length is not None and body_length < self.threshold:
            logger.debug(
                "Not compressing: body of %s bytes is below threshold of %s",
                body_length,
                self.threshold,
            )
            return False
        return True

    def select_encoder(self, state: ResponseEncodingState) -> bool:
        encoding = select_encoding(self.accepted, self.algorithms.keys())
        if encoding == ContentEncoding.IDENTITY:
            logger.debug("Not compressing: no acceptable encoding enabled")
            return False

        self.encoder = self.algorithms[encoding].create_encoder()

        # Compressed size is unknown until the body has been drained
        state.headers.popall("content-length", None)
        state.headers["content-encoding"] = encoding.value
        logger.debug("Compressing response with %s", encoding.value)
        return True
