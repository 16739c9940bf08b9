import zlib
from dataclasses import dataclass
from typing import Any

from .base import CompressionAlgorithm, ContentEncoding, StreamEncoder
from .levels import LevelSetting, resolve_level


def zlib_level(level: LevelSetting) -> int:
    return resolve_level(
        level,
        fastest=zlib.Z_BEST_SPEED,
        default=zlib.Z_DEFAULT_COMPRESSION,
        best=zlib.Z_BEST_COMPRESSION,
    )


class GzipEncoder(StreamEncoder):
    content_encoding = ContentEncoding.GZIP

    # 16 + MAX_WBITS: zlib writes the gzip header and trailer
    wbits = 16 + zlib.MAX_WBITS

    def __init__(self, level: LevelSetting) -> None:
        super().__init__()
        self.compressobj: Any = zlib.compressobj(
            zlib_level(level), zlib.DEFLATED, self.wbits
        )

    def _compress(self, data: bytes) -> bytes:
        return self.compressobj.compress(data)

    def _flush(self) -> bytes:
        return self.compressobj.flush()

    def _release(self) -> None:
        self.compressobj = None


@dataclass(frozen=True)
class GzipAlgorithm(CompressionAlgorithm):
    """Gzip compression algorithm."""

    type: ContentEncoding = ContentEncoding.GZIP

    def create_encoder(self) -> GzipEncoder:
        return GzipEncoder(level=self.level)
