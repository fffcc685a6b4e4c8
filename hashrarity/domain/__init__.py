"""
Domain layer for hashrarity.

Contains pure domain objects with no I/O or side effects:
- ObjectHash: The digest naming one stored object
- RarityTier: Common / Uncommon / Rare
- RarityThresholds: Zero-bit boundaries between tiers
- Summary: Tier counts for one enumeration pass

These objects are immutable and provide serialization methods for
JSONL output.
"""

from .object_hash import (
    ObjectHash,
    InvalidHashLength,
    SHA1_LENGTH,
    SHA256_LENGTH,
    SUPPORTED_LENGTHS,
    OBJECT_FORMATS,
)
from .rarity import RarityTier, RarityThresholds, Summary, DEFAULT_THRESHOLDS

__all__ = [
    'ObjectHash',
    'InvalidHashLength',
    'SHA1_LENGTH',
    'SHA256_LENGTH',
    'SUPPORTED_LENGTHS',
    'OBJECT_FORMATS',
    'RarityTier',
    'RarityThresholds',
    'Summary',
    'DEFAULT_THRESHOLDS',
]
