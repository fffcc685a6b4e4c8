"""
Hash rarity classification for hashrarity.

Assigns each ObjectHash to a RarityTier and folds the results into a
Summary. Classification is a pure function of the hash bytes, so the
order hashes arrive in does not matter.
"""

from typing import Iterable, Optional

from ..domain import DEFAULT_THRESHOLDS, ObjectHash, RarityThresholds, RarityTier, Summary


def classify(object_hash: ObjectHash, thresholds: RarityThresholds = DEFAULT_THRESHOLDS) -> RarityTier:
    """Tier of a single hash."""
    return thresholds.tier_for(object_hash.leading_zero_bits())


class RarityClassifier:
    """
    Running tally of tiers over a stream of hashes.

    Example:
        classifier = RarityClassifier()
        for h in hashes:
            classifier.observe(h)
        summary = classifier.summary()
    """

    def __init__(self, thresholds: Optional[RarityThresholds] = None):
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self._counts = {tier: 0 for tier in RarityTier}
        self._total = 0
        self._rarest: Optional[ObjectHash] = None
        self._rarest_zero_bits = 0

    def observe(self, object_hash: ObjectHash) -> RarityTier:
        """Count one hash and return its tier."""
        zero_bits = object_hash.leading_zero_bits()
        tier = self.thresholds.tier_for(zero_bits)

        self._total += 1
        self._counts[tier] += 1
        if self._rarest is None or zero_bits > self._rarest_zero_bits:
            self._rarest = object_hash
            self._rarest_zero_bits = zero_bits
        return tier

    @property
    def total(self) -> int:
        return self._total

    def summary(self) -> Summary:
        """Frozen snapshot of the counts so far."""
        return Summary(
            total=self._total,
            common=self._counts[RarityTier.COMMON],
            uncommon=self._counts[RarityTier.UNCOMMON],
            rare=self._counts[RarityTier.RARE],
            rarest=self._rarest,
            rarest_zero_bits=self._rarest_zero_bits,
        )


def classify_all(
    hashes: Iterable[ObjectHash],
    thresholds: Optional[RarityThresholds] = None,
) -> Summary:
    """
    Consume hashes once and return the finalized Summary.

    Errors raised by the incoming iterator (e.g. StoreUnreadable or
    CorruptObject from enumeration) propagate unchanged.
    """
    classifier = RarityClassifier(thresholds)
    for object_hash in hashes:
        classifier.observe(object_hash)
    return classifier.summary()
