from dataclasses import dataclass
from enum import Enum
from typing import Union


class Level(str, Enum):
    """Codec independent compression presets."""

    FASTEST = "fastest"
    DEFAULT = "default"
    BEST = "best"


# A preset, or a precise codec quality
LevelSetting = Union[Level, int]


def resolve_level(
    level: LevelSetting, *, fastest: int, default: int, best: int
) -> int:
    """Map a level setting onto a codec's numeric quality.

    Precise qualities are clamped to the codec's ``fastest..best`` range.
    """
    if isinstance(level, Level):
        if level == Level.FASTEST:
            return fastest
        elif level == Level.DEFAULT:
            return default
        elif level == Level.BEST:
            return best
        else:
            assert False, f"Expected code to be unreachable, but got: {level}"

    if isinstance(level, bool) or not isinstance(level, int):
        raise TypeError(
            f"Compression level must be a Level or an int, got {level!r}"
        )

    return max(fastest, min(best, level))


@dataclass(frozen=True)
class CompressionLevels:
    """The configured compression level for every supported algorithm.

    Example::

        levels = CompressionLevels(brotli=4, gzip=Level.FASTEST)
        app = CompressionMiddleware(app, levels=levels)
    """

    brotli: LevelSetting = Level.DEFAULT
    gzip: LevelSetting = Level.DEFAULT
    deflate: LevelSetting = Level.DEFAULT

    @classmethod
    def all(cls, level: LevelSetting) -> "CompressionLevels":
        """Use the same level for every algorithm."""
        return cls(brotli=level, gzip=level, deflate=level)
