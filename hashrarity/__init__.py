"""
hashrarity - How statistically unusual are your git object hashes?

Assuming hash values are uniformly distributed, a hash with a long run of
leading zero bits is rarer than one without. hashrarity walks a
repository's object store (loose and packed objects of every kind) and
counts how many object hashes fall in each rarity tier.

Quick Start:
    from hashrarity import GitClient, enumerate_objects, classify_all

    store = GitClient().open_store("~/src/myrepo")
    summary = classify_all(enumerate_objects(store))
    print(summary.total, summary.common, summary.uncommon, summary.rare)

Domain Objects:
    ObjectHash - Digest naming one stored object (20 or 32 bytes)
    RarityTier - Common, Uncommon, Rare
    RarityThresholds - Zero-bit boundaries between tiers
    Summary - Tier counts for one pass

Services:
    enumerate_objects / ObjectEnumerator - Every object hash, exactly once
    classify / classify_all / RarityClassifier - Tiering and counting
"""

__version__ = "0.1.0"

from .domain import (
    ObjectHash,
    InvalidHashLength,
    RarityTier,
    RarityThresholds,
    Summary,
    DEFAULT_THRESHOLDS,
)

from .services import (
    ObjectEnumerator,
    enumerate_objects,
    RarityClassifier,
    classify,
    classify_all,
)

from .infra import ObjectStore, GitClient

from .exit_codes import StoreUnreadable, CorruptObject

from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain objects
    "ObjectHash",
    "InvalidHashLength",
    "RarityTier",
    "RarityThresholds",
    "Summary",
    "DEFAULT_THRESHOLDS",
    # Services
    "ObjectEnumerator",
    "enumerate_objects",
    "RarityClassifier",
    "classify",
    "classify_all",
    # Infrastructure
    "ObjectStore",
    "GitClient",
    # Errors
    "StoreUnreadable",
    "CorruptObject",
    # Configuration
    "load_config",
    "save_config",
]
