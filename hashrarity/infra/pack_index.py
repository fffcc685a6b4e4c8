"""
Pack index reader for hashrarity.

A pack index (`objects/pack/pack-*.idx`) lists every object name stored in
its sibling `.pack` file, sorted ascending, behind a 256-entry fan-out
table. Two layouts exist:

Version 1 (SHA-1 only):
    fanout[256]                 4-byte big-endian cumulative counts
    entries[N]                  4-byte pack offset + 20-byte name

Version 2:
    magic "\\377tOc", version 2
    fanout[256]
    names[N]                    hash_length bytes each
    crc32[N], offsets[N], ...   (not needed to list names)

The index is memory-mapped and only its names are read; pack contents are
never inflated.
"""

import logging
import mmap
import struct
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Tuple, Union

from ..domain.object_hash import ObjectHash, SHA1_LENGTH
from ..exit_codes import CorruptObject, StoreUnreadable

logger = logging.getLogger(__name__)

PACK_IDX_V2_MAGIC = b'\xfftOc'
FANOUT_ENTRIES = 256
FANOUT_SIZE = FANOUT_ENTRIES * 4
V1_ENTRY_OFFSET_SIZE = 4


@contextmanager
def _mapped(path: Path) -> Iterator[Union[bytes, mmap.mmap]]:
    """Map an index read-only so only the pages holding names are touched."""
    try:
        with open(path, 'rb') as f:
            if f.seek(0, 2) == 0:
                # mmap refuses empty files
                mapped = None
            else:
                mapped = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
    except OSError as e:
        raise StoreUnreadable(path, e.strerror or str(e)) from e

    if mapped is None:
        yield b''
        return
    try:
        yield mapped
    finally:
        mapped.close()


def _read_fanout(path: Path, data: Union[bytes, mmap.mmap], start: int) -> Tuple[int, ...]:
    if len(data) < start + FANOUT_SIZE:
        raise CorruptObject(path, "truncated fan-out table", offset=len(data))
    fanout = struct.unpack_from(f'>{FANOUT_ENTRIES}I', data, start)
    for i in range(1, FANOUT_ENTRIES):
        if fanout[i] < fanout[i - 1]:
            raise CorruptObject(path, "fan-out table is not monotonic", offset=start + 4 * i)
    return fanout


def index_layout(path: Path, data: Union[bytes, mmap.mmap], hash_length: int) -> Tuple[int, int, int]:
    """
    Work out where the name table lives.

    Returns:
        Tuple of (fanout_start, first_name_offset, stride)
    """
    if data[:4] == PACK_IDX_V2_MAGIC:
        if len(data) < 8:
            raise CorruptObject(path, "truncated header", offset=0)
        version = struct.unpack_from('>I', data, 4)[0]
        if version != 2:
            raise CorruptObject(path, f"unsupported pack index version {version}", offset=4)
        return 8, 8 + FANOUT_SIZE, hash_length

    if hash_length != SHA1_LENGTH:
        raise CorruptObject(path, "version 1 pack index cannot hold sha256 names", offset=0)
    return 0, FANOUT_SIZE + V1_ENTRY_OFFSET_SIZE, V1_ENTRY_OFFSET_SIZE + SHA1_LENGTH


def read_pack_index(path: Union[str, Path], hash_length: int = SHA1_LENGTH) -> Iterator[ObjectHash]:
    """
    Yield every object name in a pack index.

    Args:
        path: Path to the .idx file
        hash_length: Digest size of the repository's hash scheme

    Raises:
        StoreUnreadable: If the file cannot be read
        CorruptObject: If the header, fan-out table or name table is malformed
    """
    path = Path(path)
    with _mapped(path) as data:
        yield from _iter_names(path, data, hash_length)


def _iter_names(path: Path, data: Union[bytes, mmap.mmap], hash_length: int) -> Iterator[ObjectHash]:
    fanout_start, names_start, stride = index_layout(path, data, hash_length)
    fanout = _read_fanout(path, data, fanout_start)

    count = fanout[-1]
    last_name_end = names_start + (count - 1) * stride + hash_length if count else names_start
    if len(data) < last_name_end:
        raise CorruptObject(
            path,
            f"truncated name table ({count} entries need {last_name_end} bytes, file has {len(data)})",
            offset=len(data),
        )

    logger.debug(f"Reading {count} names from {path.name}")

    previous = None
    for i in range(count):
        offset = names_start + i * stride
        digest = data[offset:offset + hash_length]

        if previous is not None and digest <= previous:
            raise CorruptObject(path, "object names are not strictly ascending", offset=offset)
        first_byte = digest[0]
        bucket_start = fanout[first_byte - 1] if first_byte else 0
        if not bucket_start <= i < fanout[first_byte]:
            raise CorruptObject(path, "object name does not match fan-out table", offset=offset)

        previous = digest
        yield ObjectHash(digest)
