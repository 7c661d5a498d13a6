"""Decompression of input documents."""

from .stream import (
    EXTENSION_KINDS,
    detect_compression,
    file_extension,
    open_decompressed,
    open_input,
)

__all__ = [
    "EXTENSION_KINDS",
    "detect_compression",
    "file_extension",
    "open_decompressed",
    "open_input",
]
