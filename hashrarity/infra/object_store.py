"""
Object store handle for hashrarity.

Wraps a git `objects/` directory and exposes its two on-disk
representations:
- Loose objects: one zlib file per object at `objects/xx/yyyy...`, where
  the hex name is the object's hash
- Packed objects: names listed in `objects/pack/*.idx`

The handle never opens object contents; hashes come from file names and
pack index tables only.
"""

import logging
import os
import string
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from ..domain.object_hash import ObjectHash, SHA1_LENGTH, SUPPORTED_LENGTHS
from ..exit_codes import StoreUnreadable
from .pack_index import read_pack_index

logger = logging.getLogger(__name__)

HEX_DIGITS = frozenset(string.hexdigits.lower())


def _is_hex(name: str) -> bool:
    return bool(name) and set(name) <= HEX_DIGITS


class ObjectStore:
    """
    Handle on an already-located git object directory.

    Example:
        store = ObjectStore("/path/to/repo/.git/objects")
        for h in store.iter_loose():
            print(h.hex)

    Attributes:
        path: The objects directory
        hash_length: Digest size of the repository's hash scheme (20 or 32)
    """

    def __init__(self, path: Union[str, Path], hash_length: int = SHA1_LENGTH):
        if hash_length not in SUPPORTED_LENGTHS:
            raise ValueError(f"Unsupported hash length {hash_length}")
        self.path = Path(path)
        self.hash_length = hash_length

    def __repr__(self) -> str:
        return f"ObjectStore({str(self.path)!r}, hash_length={self.hash_length})"

    @property
    def pack_dir(self) -> Path:
        return self.path / "pack"

    def check(self) -> None:
        """Raise StoreUnreadable unless the objects directory is usable."""
        if not self.path.exists():
            raise StoreUnreadable(self.path, "directory does not exist")
        if not self.path.is_dir():
            raise StoreUnreadable(self.path, "not a directory")
        if not os.access(self.path, os.R_OK | os.X_OK):
            raise StoreUnreadable(self.path, "permission denied")

    def _scandir(self, path: Path) -> List[os.DirEntry]:
        try:
            with os.scandir(path) as it:
                return list(it)
        except OSError as e:
            raise StoreUnreadable(path, e.strerror or str(e)) from e

    def iter_loose(self) -> Iterator[ObjectHash]:
        """
        Yield the hash of every loose object.

        Files in the fan-out directories that are not a hex name of the
        right length (e.g. `tmp_obj_*` left by an interrupted write) are
        not objects and are skipped.
        """
        self.check()
        name_length = self.hash_length * 2 - 2

        for subdir in self._scandir(self.path):
            if len(subdir.name) != 2 or not _is_hex(subdir.name):
                continue
            if not subdir.is_dir():
                continue

            for entry in self._scandir(Path(subdir.path)):
                name = entry.name
                if len(name) != name_length or not _is_hex(name):
                    logger.debug(f"Skipping non-object file {subdir.name}/{name}")
                    continue
                yield ObjectHash.from_hex(subdir.name + name)

    def pack_indexes(self) -> List[Path]:
        """
        List pack index files that have a matching .pack.

        An index without its pack is ignored by git as well.
        """
        self.check()
        if not self.pack_dir.is_dir():
            return []

        indexes = []
        for entry in self._scandir(self.pack_dir):
            if not entry.name.endswith(".idx"):
                continue
            idx_path = Path(entry.path)
            if not idx_path.with_suffix(".pack").exists():
                logger.warning(f"Ignoring {idx_path.name}: no matching .pack file")
                continue
            indexes.append(idx_path)
        return sorted(indexes)

    def iter_packed(self, on_index: Optional[Callable[[Path], None]] = None) -> Iterator[ObjectHash]:
        """
        Yield every name from every pack index, pack by pack.

        Args:
            on_index: Called with each index path before its names are read
        """
        for idx_path in self.pack_indexes():
            if on_index is not None:
                on_index(idx_path)
            yield from read_pack_index(idx_path, self.hash_length)

    def alternates(self) -> List['ObjectStore']:
        """
        Stores listed in `info/alternates`.

        Each non-comment line is an objects directory, absolute or relative
        to this one. Alternates share this store's hash scheme.
        """
        alternates_file = self.path / "info" / "alternates"
        if not alternates_file.is_file():
            return []

        try:
            lines = alternates_file.read_text().splitlines()
        except OSError as e:
            raise StoreUnreadable(alternates_file, e.strerror or str(e)) from e

        stores = []
        for line in lines:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            alt_path = Path(line)
            if not alt_path.is_absolute():
                alt_path = self.path / alt_path
            stores.append(ObjectStore(alt_path, self.hash_length))
        return stores
