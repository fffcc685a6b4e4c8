"""
Service layer for hashrarity.

Contains the enumeration and classification engine:
- ObjectEnumerator / enumerate_objects: Every object hash in a store, once
- RarityClassifier / classify / classify_all: Tiering and tier counts

Services are the primary API for commands to use.
They handle coordination between infrastructure and domain layers.
"""

from .enumeration_service import ObjectEnumerator, enumerate_objects
from .rarity_service import RarityClassifier, classify, classify_all

__all__ = [
    'ObjectEnumerator',
    'enumerate_objects',
    'RarityClassifier',
    'classify',
    'classify_all',
]
