"""
Object enumeration for hashrarity.

Walks an object store and yields each stored object's hash exactly once:
loose objects first, then every pack index, then (optionally) each
alternate store in the same order.

git does not promise that a loose object is never also packed (objects
stay loose until `git prune-packed`, and several packs may carry the same
object after repeated fetches), so hashes are deduplicated here before
they are yielded.
"""

from itertools import chain
from pathlib import Path
from typing import Any, Dict, Iterator, Set
import logging

from ..domain import ObjectHash
from ..infra import ObjectStore

logger = logging.getLogger(__name__)


class ObjectEnumerator:
    """
    One pass over every object in a store.

    Iterating returns a generator; like any generator it is exhausted
    after one pass, and a second pass needs a new ObjectEnumerator.
    Counters are filled in as the pass proceeds.

    Example:
        enumerator = ObjectEnumerator(store)
        summary = classify_all(enumerator)
        print(enumerator.loose, enumerator.packed, enumerator.duplicates)

    Attributes:
        loose: Distinct hashes yielded from loose objects
        packed: Distinct hashes yielded from pack indexes
        duplicates: Hashes skipped because they were already yielded
        packs: Pack indexes read
        stores: Object directories visited (1 + alternates)
    """

    def __init__(self, store: ObjectStore, include_alternates: bool = True):
        self.store = store
        self.include_alternates = include_alternates
        self.loose = 0
        self.packed = 0
        self.duplicates = 0
        self.packs = 0
        self.stores = 0
        self._started = False

    def __iter__(self) -> Iterator[ObjectHash]:
        if self._started:
            raise RuntimeError("ObjectEnumerator is single-pass; create a new one to enumerate again")
        self._started = True
        return self._enumerate()

    def _stores(self) -> Iterator[ObjectStore]:
        visited: Set[Path] = set()
        pending = [self.store]
        while pending:
            store = pending.pop(0)
            key = store.path.resolve()
            if key in visited:
                continue
            visited.add(key)
            yield store
            if not self.include_alternates:
                continue
            for alternate in store.alternates():
                # git warns about and skips a dangling alternate as well
                if not alternate.path.is_dir():
                    logger.warning(f"Skipping missing alternate object directory {alternate.path}")
                    continue
                pending.append(alternate)

    def _count_pack(self, idx_path: Path) -> None:
        self.packs += 1
        logger.debug(f"Reading pack index {idx_path.name}")

    def _enumerate(self) -> Iterator[ObjectHash]:
        seen: Set[bytes] = set()

        for store in self._stores():
            self.stores += 1
            logger.debug(f"Enumerating {store.path}")
            store.check()

            sources = chain(
                ((h, 'loose') for h in store.iter_loose()),
                ((h, 'packed') for h in store.iter_packed(on_index=self._count_pack)),
            )
            for object_hash, origin in sources:
                if object_hash.digest in seen:
                    self.duplicates += 1
                    continue
                seen.add(object_hash.digest)
                if origin == 'loose':
                    self.loose += 1
                else:
                    self.packed += 1
                yield object_hash

        logger.debug(
            f"Enumerated {self.loose + self.packed} objects "
            f"({self.loose} loose, {self.packed} packed, {self.duplicates} duplicates skipped)"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'loose': self.loose,
            'packed': self.packed,
            'duplicates': self.duplicates,
            'packs': self.packs,
            'stores': self.stores,
        }


def enumerate_objects(
    store: ObjectStore,
    include_alternates: bool = True,
) -> Iterator[ObjectHash]:
    """
    Lazily yield the hash of every object in store, each exactly once.

    No ordering is guaranteed. Use ObjectEnumerator directly when the
    loose/packed counters are needed.

    Args:
        store: Opened object store handle
        include_alternates: Also walk stores listed in info/alternates

    Raises:
        StoreUnreadable: Storage missing or unreadable
        CorruptObject: A pack index entry is malformed
    """
    return iter(ObjectEnumerator(store, include_alternates))
