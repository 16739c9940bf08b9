from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .base import CompressionAlgorithm, ContentEncoding, StreamEncoder
from .levels import LevelSetting, resolve_level

if TYPE_CHECKING:
    import brotli


def import_brotli() -> None:
    global brotli
    try:
        import brotli
    except ImportError as e:
        raise ImportError(
            'brotli is not installed, run `pip install "asgi-content-encoding[brotli]"`'
        ) from e


class BrotliMode(Enum):
    TEXT = "text"
    FONT = "font"
    GENERIC = "generic"

    def to_brotli_mode(self) -> int:
        if self == BrotliMode.TEXT:
            return brotli.MODE_TEXT
        elif self == BrotliMode.FONT:
            return brotli.MODE_FONT
        elif self == BrotliMode.GENERIC:
            return brotli.MODE_GENERIC
        else:
            assert False, f"Expected code to be unreachable, but got: {self}"


def brotli_quality(level: LevelSetting) -> int:
    # The library's own default quality is its best one
    return resolve_level(level, fastest=0, default=11, best=11)


class BrotliEncoder(StreamEncoder):
    content_encoding = ContentEncoding.BROTLI

    def __init__(
        self,
        level: LevelSetting,
        mode: BrotliMode = BrotliMode.GENERIC,
        lgwin: int = 22,
        lgblock: int = 0,
    ) -> None:
        super().__init__()

        import_brotli()

        self.compressor: Any = brotli.Compressor(
            quality=brotli_quality(level),
            mode=mode.to_brotli_mode(),
            lgwin=lgwin,
            lgblock=lgblock,
        )

    def _compress(self, data: bytes) -> bytes:
        return self.compressor.process(data)

    def _flush(self) -> bytes:
        return self.compressor.finish()

    def _release(self) -> None:
        self.compressor = None


@dataclass(frozen=True)
class BrotliAlgorithm(CompressionAlgorithm):
    """Brotli compression algorithm."""

    type: ContentEncoding = ContentEncoding.BROTLI
    mode: BrotliMode = BrotliMode.GENERIC
    lgwin: int = 22
    lgblock: int = 0

    def create_encoder(self) -> BrotliEncoder:
        return BrotliEncoder(
            level=self.level,
            mode=self.mode,
            lgwin=self.lgwin,
            lgblock=self.lgblock,
        )

    def check_available(self) -> None:
        import_brotli()
