import logging
from typing import Callable, Dict, FrozenSet, Iterable, Optional

from .base import SERVER_PREFERENCE, CompressionAlgorithm, ContentEncoding
from .brotli import BrotliAlgorithm
from .deflate import DeflateAlgorithm
from .gzip import GzipAlgorithm
from .headers import parse_accept_encoding
from .levels import CompressionLevels
from .responder import CompressionResponder
from .types import ASGIApp, Headers, Receive, Scope, Send

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 1024

ALGORITHM_FACTORIES: Dict[
    ContentEncoding, Callable[[CompressionLevels], CompressionAlgorithm]
] = {
    ContentEncoding.BROTLI: lambda levels: BrotliAlgorithm(level=levels.brotli),
    ContentEncoding.GZIP: lambda levels: GzipAlgorithm(level=levels.gzip),
    ContentEncoding.DEFLATE: lambda levels: DeflateAlgorithm(level=levels.deflate),
}


def available_encodings() -> FrozenSet[ContentEncoding]:
    """Encodings whose codec library can be imported."""
    encodings = set()
    for encoding, factory in ALGORITHM_FACTORIES.items():
        try:
            factory(CompressionLevels()).check_available()
        except ImportError as e:
            logger.debug("%s compression unavailable: %s", encoding.value, e)
            continue
        encodings.add(encoding)
    return frozenset(encodings)


class CompressionMiddleware:
    """
    ASGI middleware that negotiates and applies response compression.

    The client's Accept-Encoding is matched against the enabled encodings,
    and eligible response bodies are streamed through the chosen encoder.
    """

    def __init__(
        self,
        app: ASGIApp,
        threshold: int = DEFAULT_THRESHOLD,
        levels: Optional[CompressionLevels] = None,
        encodings: Optional[Iterable[ContentEncoding]] = None,
    ) -> None:
        """
        Initialize the compression middleware.

        Args:
            app: The ASGI application.
            threshold: Minimum body size in bytes that gets compressed.
                Bodies of unknown length are always eligible.
            levels: Compression level per algorithm. Defaults to each
                codec's library default.
            encodings: Encodings to offer. Defaults to every encoding whose
                codec library is installed. An empty collection disables
                compression.
        """
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")

        self.app = app
        self.threshold = threshold
        self.levels = levels or CompressionLevels()

        if encodings is None:
            enabled = available_encodings()
        else:
            enabled = frozenset(ContentEncoding(encoding) for encoding in encodings)
            if ContentEncoding.IDENTITY in enabled:
                raise ValueError("identity is not a compression algorithm")

        self.algorithms: Dict[ContentEncoding, CompressionAlgorithm] = {}
        for encoding in SERVER_PREFERENCE:
            if encoding in enabled:
                algorithm = ALGORITHM_FACTORIES[encoding](self.levels)
                algorithm.check_available()
                self.algorithms[encoding] = algorithm

        logger.debug(
            "Compression enabled for: %s",
            ", ".join(encoding.value for encoding in self.algorithms) or "nothing",
        )

    @property
    def encodings(self) -> FrozenSet[ContentEncoding]:
        return frozenset(self.algorithms)

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Read before the app runs; HEAD still has to produce its response
        headers = Headers(scope=scope)
        accept_encoding = headers.get_combined("accept-encoding")
        accepted = (
            None
            if accept_encoding is None
            else parse_accept_encoding(accept_encoding)
        )

        if scope.get("method") == "HEAD" or accepted is None:
            await self.app(scope, receive, send)
            return

        # Built even with no encodings enabled: Vary still gets merged, since
        # the same response may be compressed once a codec is available
        responder = CompressionResponder(
            self.app,
            accepted=accepted,
            algorithms=self.algorithms,
            threshold=self.threshold,
        )
        await responder(scope, receive, send)
