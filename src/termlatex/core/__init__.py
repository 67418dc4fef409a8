"""Core module - placeholder codec and macro preprocessing"""

from .macros import MacroPreprocessor, expand_macros
from .placeholder import (
    TOKEN_PATTERN,
    decode_placeholders,
    encode_placeholder,
    is_valid_hash,
    placeholder_hash,
)

__all__ = [
    "MacroPreprocessor",
    "expand_macros",
    "placeholder_hash",
    "encode_placeholder",
    "decode_placeholders",
    "is_valid_hash",
    "TOKEN_PATTERN",
]
