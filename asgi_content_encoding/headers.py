"""
Parsers for the HTTP headers that drive compression negotiation.

Only an absent header means "no preference". A header that is present but
does not follow the RFC 9110 grammar raises :class:`HeaderParseError`.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
QVALUE_RE = re.compile(r"^(?:0(?:\.[0-9]{0,3})?|1(?:\.0{0,3})?)$")
CONTENT_LENGTH_RE = re.compile(r"^[0-9]+$")

# RFC 9110 section 8.4.1.3: x-gzip is an alias of gzip
CODING_ALIASES = {"x-gzip": "gzip"}


class HeaderParseError(ValueError):
    """A header required for the compression decision is malformed."""

    def __init__(self, header: str, value: str, reason: str) -> None:
        super().__init__(f"Malformed {header} header {value!r}: {reason}")
        self.header = header
        self.value = value
        self.reason = reason


@dataclass(frozen=True)
class EncodingPreference:
    """One element of an Accept-Encoding header."""

    coding: str
    quality: float = 1.0


def split_header_list(header: str, value: str) -> List[str]:
    """Split a comma separated header value, honouring quoted strings.

    Empty elements are dropped.
    """
    items: List[str] = []
    current: List[str] = []
    in_quotes = False
    escaped = False

    for char in value:
        if escaped:
            escaped = False
        elif in_quotes and char == "\\":
            escaped = True
        elif char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    if in_quotes:
        raise HeaderParseError(header, value, "unterminated quoted string")

    items.append("".join(current).strip())
    return [item for item in items if item]


def _is_quoted_string(value: str) -> bool:
    return len(value) >= 2 and value[0] == '"' and value[-1] == '"'


def _unquote(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value[1:-1])


def parse_accept_encoding(value: str) -> List[EncodingPreference]:
    """Parse an Accept-Encoding value into preferences, in header order."""
    preferences: List[EncodingPreference] = []

    for item in split_header_list("Accept-Encoding", value):
        coding, *params = (piece.strip() for piece in item.split(";"))
        if not TOKEN_RE.match(coding):
            raise HeaderParseError(
                "Accept-Encoding", value, f"invalid content-coding {coding!r}"
            )

        quality = 1.0
        for param in params:
            name, sep, argument = param.partition("=")
            name = name.strip()
            if not sep or not TOKEN_RE.match(name):
                raise HeaderParseError(
                    "Accept-Encoding", value, f"invalid parameter {param!r}"
                )
            if name.lower() == "q":
                argument = argument.strip()
                if not QVALUE_RE.match(argument):
                    raise HeaderParseError(
                        "Accept-Encoding", value, f"invalid qvalue {argument!r}"
                    )
                quality = float(argument)

        coding = coding.lower()
        preferences.append(
            EncodingPreference(CODING_ALIASES.get(coding, coding), quality)
        )

    return preferences


def parse_cache_control(value: str) -> Dict[str, Optional[str]]:
    """Parse a Cache-Control value into lower-cased directives.

    Directives without an argument map to ``None``.
    """
    directives: Dict[str, Optional[str]] = {}

    for item in split_header_list("Cache-Control", value):
        name, sep, argument = item.partition("=")
        name = name.strip()
        if not TOKEN_RE.match(name):
            raise HeaderParseError(
                "Cache-Control", value, f"invalid directive {name!r}"
            )

        parsed: Optional[str] = None
        if sep:
            argument = argument.strip()
            if _is_quoted_string(argument):
                parsed = _unquote(argument)
            elif TOKEN_RE.match(argument):
                parsed = argument
            else:
                raise HeaderParseError(
                    "Cache-Control",
                    value,
                    f"invalid argument {argument!r} for {name!r}",
                )
        directives[name.lower()] = parsed

    return directives


def _parse_token_list(header: str, value: str) -> List[str]:
    tokens = []
    for item in split_header_list(header, value):
        if not TOKEN_RE.match(item):
            raise HeaderParseError(header, value, f"invalid element {item!r}")
        tokens.append(item)
    return tokens


def parse_content_encoding(value: str) -> List[str]:
    """Parse a Content-Encoding value into lower-cased codings."""
    codings = [
        coding.lower() for coding in _parse_token_list("Content-Encoding", value)
    ]
    return [CODING_ALIASES.get(coding, coding) for coding in codings]


def parse_vary(value: str) -> List[str]:
    """Parse a Vary value into field names, or ``["*"]``."""
    return _parse_token_list("Vary", value)


def parse_content_length(value: str) -> int:
    lengths = {item.strip() for item in value.split(",")}
    if len(lengths) != 1:
        raise HeaderParseError("Content-Length", value, "conflicting values")

    (length,) = lengths
    if not CONTENT_LENGTH_RE.match(length):
        raise HeaderParseError("Content-Length", value, "not a decimal length")
    return int(length)
