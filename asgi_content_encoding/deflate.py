import zlib
from dataclasses import dataclass

from .base import CompressionAlgorithm, ContentEncoding
from .gzip import GzipEncoder


class DeflateEncoder(GzipEncoder):
    """HTTP "deflate": the zlib data format (RFC 1950), not raw deflate."""

    content_encoding = ContentEncoding.DEFLATE
    wbits = zlib.MAX_WBITS


@dataclass(frozen=True)
class DeflateAlgorithm(CompressionAlgorithm):
    """Deflate compression algorithm."""

    type: ContentEncoding = ContentEncoding.DEFLATE

    def create_encoder(self) -> DeflateEncoder:
        return DeflateEncoder(level=self.level)
