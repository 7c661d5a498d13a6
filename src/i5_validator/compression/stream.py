"""Selection and opening of decompression wrappers.

Corpus files are often shipped as ``.xml.gz``, ``.xml.bz2`` or ``.xml.xz``.
The compression kind is chosen from the final extension of the file name; files
without a recognized extension use the default kind requested by the caller.
"""

import bz2
import gzip
import lzma
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Union

from i5_validator.shared.config import CompressionKind

EXTENSION_KINDS: Dict[str, CompressionKind] = {
    "xz": CompressionKind.XZ,
    "bz2": CompressionKind.BZIP2,
    "bzip2": CompressionKind.BZIP2,
    "gz": CompressionKind.GZIP,
    "gzip": CompressionKind.GZIP,
}


def file_extension(name: Union[str, Path]) -> str:
    """Return the text after the last dot of the base name.

    >>> file_extension("corpus/dereko.i5.xml.bz2")
    'bz2'
    >>> file_extension("corpus.d/README")
    ''
    """
    base = os.path.basename(str(name))
    _, dot, extension = base.rpartition(".")
    return extension if dot else ""


def detect_compression(
    name: Union[str, Path],
    default: CompressionKind = CompressionKind.NONE,
) -> CompressionKind:
    """Choose the compression kind for a file name.

    The match on the extension is case-sensitive. A recognized extension wins
    over ``default``; anything else falls back to it.
    """
    return EXTENSION_KINDS.get(file_extension(name), default)


def open_decompressed(raw: BinaryIO, kind: CompressionKind) -> BinaryIO:
    """Wrap a binary stream in the decompressor for ``kind``.

    Closing the wrapper leaves ``raw`` open.
    """
    if kind is CompressionKind.GZIP:
        return gzip.GzipFile(fileobj=raw, mode="rb")
    if kind is CompressionKind.BZIP2:
        return bz2.BZ2File(raw, mode="rb")
    if kind is CompressionKind.XZ:
        return lzma.LZMAFile(raw, mode="rb")
    return raw


@contextmanager
def open_input(path: Union[str, Path], kind: CompressionKind) -> Iterator[BinaryIO]:
    """Open ``path`` for reading through the decompressor for ``kind``.

    Both the file handle and the decompressor are closed on exit, including
    when the body raises.
    """
    with open(path, "rb") as raw:
        stream = open_decompressed(raw, kind)
        try:
            yield stream
        finally:
            if stream is not raw:
                stream.close()
