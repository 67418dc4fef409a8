"""Placeholder token codec

A placeholder token is the only format written into grid content:

    <sentinel U+E000><3-char hash [0-9A-Za-z]><filler ...>

It occupies exactly ``width`` grid columns. Decoding is row-local: any
sentinel immediately followed by a full hash code is a token, regardless of
column offset.
"""

import hashlib
import re
from collections.abc import Iterator

from .. import config

_ALPHABET = config.PLACEHOLDER_ALPHABET
_HASH_SPACE = len(_ALPHABET) ** config.PLACEHOLDER_HASH_LENGTH

# 行内 token 起始：sentinel + 完整 hash（不含 filler）
TOKEN_PATTERN = re.compile(
    re.escape(config.PLACEHOLDER_SENTINEL)
    + f"([0-9A-Za-z]{{{config.PLACEHOLDER_HASH_LENGTH}}})"
)


def placeholder_hash(text: str, display: bool) -> str:
    """Compute the fixed-length hash code of a normalized expression.

    Deterministic across processes; collisions are possible since the code
    space is only 62**3.

    Args:
        text: Normalized expression source
        display: True for block (display) mode, False for inline

    Returns:
        Hash code of ``PLACEHOLDER_HASH_LENGTH`` alphanumeric characters
    """
    mode = "block" if display else "inline"
    digest = hashlib.md5(f"{mode}\x00{text}".encode("utf-8")).digest()
    value = int.from_bytes(digest[:8], "big") % _HASH_SPACE

    chars = []
    for _ in range(config.PLACEHOLDER_HASH_LENGTH):
        value, index = divmod(value, len(_ALPHABET))
        chars.append(_ALPHABET[index])
    return "".join(reversed(chars))


def is_valid_hash(hash_code: str) -> bool:
    """Check that a string is a well-formed hash code."""
    return len(hash_code) == config.PLACEHOLDER_HASH_LENGTH and all(
        c in _ALPHABET for c in hash_code
    )


def encode_placeholder(hash_code: str, width: int) -> str:
    """Encode a hash into a token exactly ``width`` columns wide.

    Args:
        hash_code: Hash from ``placeholder_hash``
        width: Token width in grid cells, at least hash length + 1

    Returns:
        Token text

    Raises:
        ValueError: Invalid hash code or width too small
    """
    if not is_valid_hash(hash_code):
        raise ValueError(f"Invalid placeholder hash: {hash_code!r}")
    min_width = config.PLACEHOLDER_HASH_LENGTH + 1
    if width < min_width:
        raise ValueError(f"Placeholder width {width} < {min_width}")

    filler = config.PLACEHOLDER_FILLER * (width - min_width)
    return f"{config.PLACEHOLDER_SENTINEL}{hash_code}{filler}"


def decode_placeholders(row_text: str) -> Iterator[tuple[str, int]]:
    """Yield every (hash, start_column) token in one row, left to right.

    Args:
        row_text: Plain text of a single grid row

    Yields:
        (hash_code, column) pairs
    """
    for match in TOKEN_PATTERN.finditer(row_text):
        yield match.group(1), match.start()

