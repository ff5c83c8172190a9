"""
Tip Rotation

Shows saving tips one at a time so no tip repeats until every tip in the
current set has been shown. Then the cycle restarts in a fresh random order.

The not-yet-shown ids of the current cycle live in a "bag". The bag is a
plain value (TipBag): functions here take a bag and return a new one, and
the TipCarousel session controller is the only thing that loads or saves
it, through a BagStore.

Set changes between sessions:
- A tip that disappeared is dropped from the stored bag
- A tip that appeared starts a fresh cycle, so it can't be skipped
  until the old cycle runs out. TipBag.cycle records which set the bag
  was built from.
"""

import random
from typing import Iterable, Optional, Sequence

from edufin.models.content import Tip, TipBag
from edufin.tips.store import BagStore


def shuffled(ids: Sequence[str], rng: random.Random) -> list[str]:
    """
    Unbiased Fisher-Yates shuffle into a new list.

    Every permutation is equally likely given a uniform rng.
    """
    items = list(ids)
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]
    return items


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def ensure_bag(
    tip_ids: Iterable[str],
    stored: Optional[TipBag],
    rng: random.Random,
) -> TipBag:
    """
    Return a usable bag for the current tip set.

    The stored bag is kept, minus ids no longer in the set, unless that
    leaves it empty or the set gained tips since it was built. In those
    cases a new random permutation of the whole set is returned.
    """
    ids = _unique(tip_ids)
    if not ids:
        return TipBag()

    current = set(ids)
    cycle = sorted(current)

    if stored is not None and current <= set(stored.cycle):
        remaining = [tip_id for tip_id in stored.ids if tip_id in current]
        remaining = _unique(remaining)
        if remaining:
            return TipBag(ids=remaining, cycle=cycle)

    return TipBag(ids=shuffled(ids, rng), cycle=cycle)


def draw(bag: TipBag) -> tuple[Optional[str], TipBag]:
    """Take the next id off the end of the bag. (None, empty bag) if there is none."""
    if not bag.ids:
        return None, TipBag(cycle=bag.cycle)
    return bag.ids[-1], TipBag(ids=bag.ids[:-1], cycle=bag.cycle)


class TipCarousel:
    """
    One user's tip session.

    Owns the current bag and persists every change through the store,
    so a page reload picks up mid-cycle.
    """

    def __init__(
        self,
        tips: Sequence[Tip],
        store: BagStore,
        rng: Optional[random.Random] = None,
    ):
        self._tips = {tip.id: tip for tip in tips}
        self._order = [tip.id for tip in tips]
        self._store = store
        self._rng = rng or random.SystemRandom()
        self._bag = TipBag()
        self._current_id: Optional[str] = None
        self.refresh()

    def _save(self, bag: TipBag) -> None:
        self._store.save(bag)
        self._bag = bag

    def refresh(self) -> TipBag:
        """Reconcile the stored bag with the current tip set."""
        stored = self._store.load()
        bag = ensure_bag(self._order, stored, self._rng)
        if bag != stored:
            self._save(bag)
        else:
            self._bag = bag
        return bag

    def start(self) -> Optional[Tip]:
        """Show a first tip if none is showing yet."""
        if self._current_id is None:
            return self.next_tip()
        return self.current

    def next_tip(self) -> Optional[Tip]:
        """Advance to the next unseen tip, reshuffling when the cycle is done."""
        if not self._order:
            self._current_id = None
            return None

        bag = ensure_bag(self._order, self._store.load(), self._rng)
        tip_id, bag = draw(bag)
        self._save(bag)
        self._current_id = tip_id
        return self.current

    @property
    def available(self) -> bool:
        """False when there are no tips at all."""
        return bool(self._order)

    @property
    def current(self) -> Optional[Tip]:
        if self._current_id is None:
            return None
        return self._tips.get(self._current_id)

    @property
    def remaining(self) -> int:
        return len(self._bag.ids)

    @property
    def progress(self) -> tuple[int, int]:
        """(seen, total) for the current cycle."""
        total = len(self._order)
        return total - len(self._bag.ids), total

    @property
    def cycle_complete(self) -> bool:
        """Every tip has been shown; the next draw starts a new cycle."""
        return self.available and not self._bag.ids
