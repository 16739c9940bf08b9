from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Optional, Type

from .levels import Level, LevelSetting


class ContentEncoding(str, Enum):
    BROTLI = "br"
    GZIP = "gzip"
    DEFLATE = "deflate"
    IDENTITY = "identity"


# Server preference, used for ties and wildcards
SERVER_PREFERENCE = (
    ContentEncoding.BROTLI,
    ContentEncoding.GZIP,
    ContentEncoding.DEFLATE,
)


class StreamEncoder(ABC):
    """Incremental encoder that a response body streams through.

    Every call to :meth:`compress` returns whatever output the codec has
    ready; :meth:`flush` ends the stream. Bytes come out in the order they
    went in.
    """

    content_encoding: ContentEncoding

    def __init__(self) -> None:
        self.closed = False

    def compress(self, data: bytes) -> bytes:
        self._check_open()
        return self._compress(data)

    def flush(self) -> bytes:
        self._check_open()
        return self._flush()

    def close(self) -> None:
        """Release the codec. Safe to call more than once."""
        self.closed = True
        self._release()

    def __enter__(self) -> "StreamEncoder":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed encoder")

    @abstractmethod
    def _compress(self, data: bytes) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def _flush(self) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def _release(self) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class CompressionAlgorithm(ABC):
    """Base class for compression algorithms."""

    type: ContentEncoding
    level: LevelSetting = Level.DEFAULT

    @abstractmethod
    def create_encoder(self) -> StreamEncoder:
        """Create a fresh encoder for one response body."""
        raise NotImplementedError

    def check_available(self) -> None:
        """Raise ImportError if the codec library is missing."""
