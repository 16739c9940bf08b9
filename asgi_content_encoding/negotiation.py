from typing import Collection, List, Optional, Sequence, Tuple

from .base import SERVER_PREFERENCE, ContentEncoding
from .headers import EncodingPreference


def select_encoding(
    accepted: Optional[Sequence[EncodingPreference]],
    available: Collection[ContentEncoding],
) -> ContentEncoding:
    """
    Pick the encoding the client prefers most among the enabled ones.

    Quality values rank the candidates; equal qualities keep header order.
    A ``*`` entry stands for every enabled encoding the header does not
    name explicitly, in server preference order. Anything with ``q=0`` is
    unacceptable. Falls back to identity when nothing enabled is acceptable.
    """
    if not accepted:
        return ContentEncoding.IDENTITY

    enabled = [encoding for encoding in SERVER_PREFERENCE if encoding in available]
    if not enabled:
        return ContentEncoding.IDENTITY

    explicit = {preference.coding for preference in accepted}
    candidates: List[Tuple[float, ContentEncoding]] = []

    for preference in accepted:
        if preference.coding == "*":
            candidates.extend(
                (preference.quality, encoding)
                for encoding in enabled
                if encoding.value not in explicit
            )
        elif preference.coding == ContentEncoding.IDENTITY.value:
            candidates.append((preference.quality, ContentEncoding.IDENTITY))
        else:
            for encoding in enabled:
                if encoding.value == preference.coding:
                    candidates.append((preference.quality, encoding))

    for quality, encoding in sorted(candidates, key=lambda c: -c[0]):
        if quality > 0:
            return encoding

    return ContentEncoding.IDENTITY
