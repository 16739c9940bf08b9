from .base import CompressionAlgorithm, ContentEncoding, StreamEncoder
from .brotli import BrotliAlgorithm, BrotliMode
from .deflate import DeflateAlgorithm
from .gzip import GzipAlgorithm
from .headers import EncodingPreference, HeaderParseError
from .levels import CompressionLevels, Level
from .middleware import CompressionMiddleware, available_encodings
from .negotiation import select_encoding

__all__ = [
    "CompressionMiddleware",
    "CompressionAlgorithm",
    "CompressionLevels",
    "ContentEncoding",
    "EncodingPreference",
    "HeaderParseError",
    "Level",
    "StreamEncoder",
    "GzipAlgorithm",
    "DeflateAlgorithm",
    "BrotliAlgorithm",
    "BrotliMode",
    "available_encodings",
    "select_encoding",
]
