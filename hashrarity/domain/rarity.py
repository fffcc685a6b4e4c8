"""
Rarity domain objects for hashrarity.

Under the assumption that object hashes are uniformly distributed, each
bit is an independent fair coin, so a hash with at least z leading zero
bits turns up with probability 2^-z. Tiers are fixed thresholds on z:

    z < common_bits                    -> Common
    common_bits <= z < uncommon_bits   -> Uncommon
    z >= uncommon_bits                 -> Rare   (open-ended)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .object_hash import ObjectHash


class RarityTier(Enum):
    """How unusual a hash's leading-zero run is."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"

    @property
    def rank(self) -> int:
        """Position in the ordering Common < Uncommon < Rare."""
        return _TIER_ORDER.index(self)

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: str) -> 'RarityTier':
        """Look up a tier by name, case-insensitively."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown rarity tier {name!r} (expected one of: "
                f"{', '.join(t.value for t in cls)})"
            ) from None

    def __str__(self) -> str:
        return self.label


_TIER_ORDER = (RarityTier.COMMON, RarityTier.UNCOMMON, RarityTier.RARE)


@dataclass(frozen=True)
class RarityThresholds:
    """
    The two zero-bit boundaries between tiers.

    Attributes:
        common_bits: Fewest leading zero bits for Uncommon
        uncommon_bits: Fewest leading zero bits for Rare
    """

    common_bits: int = 8
    uncommon_bits: int = 16

    def __post_init__(self):
        for name in ('common_bits', 'uncommon_bits'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if self.common_bits > self.uncommon_bits:
            raise ValueError(
                f"common_bits ({self.common_bits}) must not exceed "
                f"uncommon_bits ({self.uncommon_bits})"
            )

    def tier_for(self, zero_bits: int) -> RarityTier:
        if zero_bits >= self.uncommon_bits:
            return RarityTier.RARE
        if zero_bits >= self.common_bits:
            return RarityTier.UNCOMMON
        return RarityTier.COMMON

    def expected_fraction(self, tier: RarityTier) -> float:
        """Probability that a uniformly random hash falls in tier."""
        at_least_common = 2.0 ** -self.common_bits
        at_least_uncommon = 2.0 ** -self.uncommon_bits
        if tier is RarityTier.COMMON:
            return 1.0 - at_least_common
        if tier is RarityTier.UNCOMMON:
            return at_least_common - at_least_uncommon
        return at_least_uncommon

    def bit_range(self, tier: RarityTier) -> str:
        """Human-readable zero-bit range for tier, e.g. '8-15'."""
        if tier is RarityTier.COMMON:
            return f"<{self.common_bits}"
        if tier is RarityTier.UNCOMMON:
            return f"{self.common_bits}-{self.uncommon_bits - 1}"
        return f">={self.uncommon_bits}"

    def to_dict(self) -> Dict[str, int]:
        return {'common_bits': self.common_bits, 'uncommon_bits': self.uncommon_bits}


DEFAULT_THRESHOLDS = RarityThresholds()


@dataclass(frozen=True)
class Summary:
    """
    Aggregate tier counts for one enumeration pass.

    Invariant: total == common + uncommon + rare.

    Attributes:
        total: Number of hashes observed
        common: Hashes classified Common
        uncommon: Hashes classified Uncommon
        rare: Hashes classified Rare
        rarest: Hash with the most leading zero bits seen (None if empty)
        rarest_zero_bits: Leading zero bits of rarest
    """

    total: int = 0
    common: int = 0
    uncommon: int = 0
    rare: int = 0
    rarest: Optional[ObjectHash] = None
    rarest_zero_bits: int = 0

    def __post_init__(self):
        counts = (self.total, self.common, self.uncommon, self.rare)
        if any(c < 0 for c in counts):
            raise ValueError(f"Summary counts must be >= 0: {counts}")
        if self.total != self.common + self.uncommon + self.rare:
            raise ValueError(
                f"Summary total {self.total} does not match tier counts "
                f"{self.common} + {self.uncommon} + {self.rare}"
            )

    def count(self, tier: RarityTier) -> int:
        return getattr(self, tier.value)

    def counts(self) -> Dict[RarityTier, int]:
        return {tier: self.count(tier) for tier in _TIER_ORDER}

    def __add__(self, other: 'Summary') -> 'Summary':
        """Merge two partial summaries (e.g. one per worker)."""
        if not isinstance(other, Summary):
            return NotImplemented
        rarest, rarest_bits = self.rarest, self.rarest_zero_bits
        if other.rarest is not None and (rarest is None or other.rarest_zero_bits > rarest_bits):
            rarest, rarest_bits = other.rarest, other.rarest_zero_bits
        return Summary(
            total=self.total + other.total,
            common=self.common + other.common,
            uncommon=self.uncommon + other.uncommon,
            rare=self.rare + other.rare,
            rarest=rarest,
            rarest_zero_bits=rarest_bits,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'common': self.common,
            'uncommon': self.uncommon,
            'rare': self.rare,
            'rarest': self.rarest.hex if self.rarest else None,
            'rarest_zero_bits': self.rarest_zero_bits,
        }
