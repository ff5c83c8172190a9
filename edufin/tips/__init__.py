"""
Tip Rotation Package

Shuffle-bag rotation of saving tips plus the stores that persist the bag.
"""

from edufin.tips.store import (
    BAG_KEY,
    BagStore,
    JsonFileBagStore,
    MemoryBagStore,
    bag_key,
)
from edufin.tips.rotation import TipCarousel, draw, ensure_bag, shuffled

__all__ = [
    "BAG_KEY",
    "BagStore",
    "JsonFileBagStore",
    "MemoryBagStore",
    "TipCarousel",
    "bag_key",
    "draw",
    "ensure_bag",
    "shuffled",
]
