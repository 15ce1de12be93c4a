"""
Streaming decompression for downloaded artifacts.

The codecs applied to a download are chosen purely from the extension
segments of the save file name:

- gz:  incremental gzip decompression (zlib)
- tar: non-seekable tar stream, emits one member
- zip: spooled to a temp file (the format needs seeking), emits one member

Every stage is a generator taking an iterator of byte chunks and yielding
byte chunks, so stages compose without loading the payload into memory.

Example:
    >>> codec_chain("tool.tar.gz")
    ['gz', 'tar']
    >>> codec_chain("tool")
    []
"""

import io
import logging
import tarfile
import tempfile
import zipfile
import zlib
from pathlib import PurePosixPath
from typing import Callable, Iterable, Iterator, List, Optional

from binfetch.core.exceptions import DecodeFailed

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
SPOOL_MAX_SIZE = 16 * 1024 * 1024

KNOWN_CODECS = ("tar", "gz", "zip")


def codec_chain(save_name: str) -> List[str]:
    """
    Get the codecs to apply for a save file name, in decode order.

    The base name segment is never treated as a codec. Codecs decode from
    the outermost extension inwards, so 'a.tar.gz' yields ['gz', 'tar'].
    Unknown extensions are ignored.

    Args:
        save_name: File name (not a path) the artifact is saved under

    Returns:
        List of codec names, possibly empty
    """
    segments = save_name.lower().split(".")[1:]
    known = [segment for segment in segments if segment in KNOWN_CODECS]
    return list(reversed(known))


def decode_stream(
    chunks: Iterable[bytes], save_name: str, binary_name: Optional[str] = None
) -> Iterator[bytes]:
    """
    Pipe chunks through every codec selected by the save file name.

    Args:
        chunks: Raw response body chunks
        save_name: File name the result is saved under
        binary_name: Preferred archive member name (defaults to the stem of
            save_name)

    Returns:
        Iterator of decoded chunks (the input itself when no codec applies)

    Raises:
        DecodeFailed: While iterating, if any stage hits corrupt data
    """
    chain = codec_chain(save_name)
    logger.debug(f"Codec chain for {save_name}: {chain or 'identity'}")

    wanted = _binary_stem(binary_name or save_name)
    stream: Iterator[bytes] = iter(chunks)

    for codec in chain:
        if codec == "gz":
            stream = gunzip(stream)
        elif codec == "tar":
            stream = untar(stream, wanted)
        elif codec == "zip":
            stream = unzip(stream, wanted)

    return stream


# ============================================================================
# Codec Stages
# ============================================================================


def gunzip(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """
    Decompress a gzip stream incrementally.

    Concatenated members (as written by pigz, bgzip or 'cat a.gz b.gz')
    are decoded one after another, like gzip.decompress() does.
    """
    decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
    started = False

    try:
        for chunk in chunks:
            while chunk:
                started = True
                data = decompressor.decompress(chunk)
                if data:
                    yield data
                if not decompressor.eof:
                    break
                # Leftover bytes belong to the next member
                chunk = decompressor.unused_data
                decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
                started = False
        tail = decompressor.flush()
    except zlib.error as e:
        raise DecodeFailed(f"Invalid gzip data: {e}") from e

    if started and not decompressor.eof:
        raise DecodeFailed("Truncated gzip stream")
    if tail:
        yield tail


def untar(chunks: Iterable[bytes], wanted: str) -> Iterator[bytes]:
    """
    Emit the bytes of one regular file from a tar stream.

    The first member named after the binary wins. Otherwise the first
    regular file is used, which is held in a spooled temp file until the
    end of the archive shows no better match exists.
    """
    fallback = None

    try:
        try:
            with tarfile.open(fileobj=_ChunkReader(chunks), mode="r|") as archive:
                for member in archive:
                    if not member.isfile():
                        continue

                    source = archive.extractfile(member)
                    if source is None:
                        continue

                    if _member_matches(member.name, wanted):
                        logger.debug(f"Extracting tar member {member.name}")
                        yield from _read_chunks(source)
                        return

                    if fallback is None:
                        logger.debug(f"Holding tar member {member.name} as fallback")
                        fallback = tempfile.SpooledTemporaryFile(
                            max_size=SPOOL_MAX_SIZE
                        )
                        for data in _read_chunks(source):
                            fallback.write(data)
        except (tarfile.TarError, EOFError) as e:
            raise DecodeFailed(f"Invalid tar data: {e}") from e

        if fallback is None:
            raise DecodeFailed("Tar archive contains no regular file")

        fallback.seek(0)
        yield from _read_chunks(fallback)
    finally:
        if fallback is not None:
            fallback.close()


def unzip(chunks: Iterable[bytes], wanted: str) -> Iterator[bytes]:
    """Emit the bytes of one regular file from a zip stream."""
    with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE) as spool:
        for chunk in chunks:
            spool.write(chunk)
        spool.seek(0)

        try:
            with zipfile.ZipFile(spool) as archive:
                files = [info for info in archive.infolist() if not info.is_dir()]
                info = _select_member(files, lambda i: i.filename, wanted)
                if info is None:
                    raise DecodeFailed("Zip archive contains no regular file")

                logger.debug(f"Extracting zip member {info.filename}")
                with archive.open(info) as source:
                    yield from _read_chunks(source)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError) as e:
            raise DecodeFailed(f"Invalid zip data: {e}") from e


# ============================================================================
# Helpers
# ============================================================================


class _ChunkReader(io.RawIOBase):
    """Read-only file object over an iterator of byte chunks."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


def _read_chunks(source) -> Iterator[bytes]:
    while chunk := source.read(CHUNK_SIZE):
        yield chunk


def _binary_stem(name: str) -> str:
    return PurePosixPath(name).name.split(".", 1)[0]


def _member_matches(member_path: str, wanted: str) -> bool:
    base = PurePosixPath(member_path).name
    if base.lower().endswith(".exe"):
        base = base[:-4]
    return base == wanted


def _select_member(members: list, name_of: Callable, wanted: str):
    for member in members:
        if _member_matches(name_of(member), wanted):
            return member
    return members[0] if members else None


__all__ = [
    "KNOWN_CODECS",
    "codec_chain",
    "decode_stream",
    "gunzip",
    "untar",
    "unzip",
]
