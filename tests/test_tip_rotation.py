"""Tests for shuffle-bag tip rotation."""

import json
import random
from collections import Counter
from itertools import permutations

import pytest

from edufin.models import Tip, TipBag
from edufin.tips import (
    BAG_KEY,
    JsonFileBagStore,
    MemoryBagStore,
    TipCarousel,
    bag_key,
    draw,
    ensure_bag,
    shuffled,
)


IDS = ["a", "b", "c", "d", "e"]


def make_tips(ids):
    return [Tip(id=tip_id, text=f"Tip {tip_id}") for tip_id in ids]


class TestShuffle:
    """Tests for the Fisher-Yates shuffle."""

    def test_is_a_permutation(self):
        result = shuffled(IDS, random.Random(1))
        assert sorted(result) == sorted(IDS)
        assert len(result) == len(IDS)

    def test_does_not_mutate_input(self):
        ids = list(IDS)
        shuffled(ids, random.Random(2))
        assert ids == IDS

    def test_empty_and_single(self):
        assert shuffled([], random.Random(3)) == []
        assert shuffled(["only"], random.Random(3)) == ["only"]

    def test_every_permutation_is_reachable_and_roughly_uniform(self):
        """All 6 orders of 3 items appear with close to equal frequency."""
        rng = random.Random(12345)
        trials = 60000
        counts = Counter(tuple(shuffled(["x", "y", "z"], rng)) for _ in range(trials))

        assert set(counts) == set(permutations(["x", "y", "z"]))
        expected = trials / 6
        for count in counts.values():
            assert abs(count - expected) < expected * 0.05


class TestEnsureBag:
    """Tests for ensure_bag()."""

    def test_no_stored_bag_builds_full_permutation(self):
        bag = ensure_bag(IDS, None, random.Random(4))
        assert sorted(bag.ids) == sorted(IDS)
        assert bag.cycle == sorted(IDS)

    def test_empty_tip_set_gives_empty_bag(self):
        bag = ensure_bag([], TipBag(ids=["a"], cycle=["a"]), random.Random(5))
        assert bag.ids == []

    def test_keeps_stored_order(self):
        stored = TipBag(ids=["c", "a"], cycle=sorted(IDS))
        bag = ensure_bag(IDS, stored, random.Random(6))
        assert bag.ids == ["c", "a"]

    def test_removed_tip_is_dropped(self):
        """A tip deleted between sessions disappears from the bag without error."""
        stored = TipBag(ids=["b", "x", "a"], cycle=sorted(IDS + ["x"]))
        bag = ensure_bag(IDS, stored, random.Random(7))
        assert bag.ids == ["b", "a"]
        assert bag.cycle == sorted(IDS)

    def test_all_remaining_removed_reshuffles(self):
        stored = TipBag(ids=["x", "y"], cycle=sorted(IDS + ["x", "y"]))
        bag = ensure_bag(IDS, stored, random.Random(8))
        assert sorted(bag.ids) == sorted(IDS)

    def test_exhausted_bag_reshuffles(self):
        stored = TipBag(ids=[], cycle=sorted(IDS))
        bag = ensure_bag(IDS, stored, random.Random(9))
        assert sorted(bag.ids) == sorted(IDS)

    def test_added_tip_starts_new_cycle(self):
        """A new tip is never stranded until the old cycle runs out."""
        stored = TipBag(ids=["a"], cycle=["a", "b", "c", "d"])
        bag = ensure_bag(IDS, stored, random.Random(10))
        assert sorted(bag.ids) == sorted(IDS)
        assert "e" in bag.ids

    def test_duplicate_ids_are_collapsed(self):
        bag = ensure_bag(["a", "a", "b"], None, random.Random(11))
        assert sorted(bag.ids) == ["a", "b"]


class TestDraw:

    def test_takes_from_the_end(self):
        tip_id, rest = draw(TipBag(ids=["a", "b", "c"], cycle=["a", "b", "c"]))
        assert tip_id == "c"
        assert rest.ids == ["a", "b"]
        assert rest.cycle == ["a", "b", "c"]

    def test_empty_bag(self):
        tip_id, rest = draw(TipBag())
        assert tip_id is None
        assert rest.ids == []

    def test_does_not_mutate_input(self):
        bag = TipBag(ids=["a", "b"], cycle=["a", "b"])
        draw(bag)
        assert bag.ids == ["a", "b"]


class TestTipCarousel:
    """Tests for the session controller."""

    def test_n_draws_show_every_tip_once(self):
        carousel = TipCarousel(make_tips(IDS), MemoryBagStore(), random.Random(20))
        shown = [carousel.next_tip().id for _ in IDS]
        assert sorted(shown) == sorted(IDS)
        assert carousel.cycle_complete

    def test_draw_after_cycle_reshuffles_once(self):
        store = MemoryBagStore()
        carousel = TipCarousel(make_tips(IDS), store, random.Random(21))
        for _ in IDS:
            carousel.next_tip()

        assert carousel.next_tip() is not None
        assert len(store.bag.ids) == len(IDS) - 1
        assert not carousel.cycle_complete

    def test_many_cycles_never_repeat_within_a_cycle(self):
        carousel = TipCarousel(make_tips(IDS), MemoryBagStore(), random.Random(22))
        for _ in range(4):
            cycle = [carousel.next_tip().id for _ in IDS]
            assert len(set(cycle)) == len(IDS)

    def test_progress(self):
        carousel = TipCarousel(make_tips(IDS), MemoryBagStore(), random.Random(23))
        assert carousel.progress == (0, 5)
        carousel.next_tip()
        carousel.next_tip()
        assert carousel.progress == (2, 5)
        assert carousel.remaining == 3

    def test_start_shows_one_tip_and_is_idempotent(self):
        carousel = TipCarousel(make_tips(IDS), MemoryBagStore(), random.Random(24))
        first = carousel.start()
        assert carousel.start() == first
        assert carousel.current == first
        assert carousel.progress == (1, 5)

    def test_empty_tip_set_is_unavailable(self):
        carousel = TipCarousel([], MemoryBagStore(), random.Random(25))
        assert not carousel.available
        assert carousel.start() is None
        assert carousel.next_tip() is None
        assert carousel.current is None
        assert carousel.progress == (0, 0)
        assert not carousel.cycle_complete

    def test_every_draw_is_persisted(self):
        store = MemoryBagStore()
        carousel = TipCarousel(make_tips(IDS), store, random.Random(26))
        tip = carousel.next_tip()
        assert tip.id not in store.bag.ids
        assert len(store.bag.ids) == 4

    def test_resumes_mid_cycle_from_store(self):
        """A new session picks up the same cycle instead of starting over."""
        store = MemoryBagStore()
        first = TipCarousel(make_tips(IDS), store, random.Random(27))
        seen = {first.next_tip().id, first.next_tip().id}

        second = TipCarousel(make_tips(IDS), store, random.Random(99))
        rest = {second.next_tip().id for _ in range(3)}
        assert seen | rest == set(IDS)
        assert second.cycle_complete

    def test_removed_tip_never_shown(self):
        store = MemoryBagStore(TipBag(ids=["a", "gone", "b"], cycle=["a", "b", "gone"]))
        carousel = TipCarousel(make_tips(["a", "b"]), store, random.Random(28))
        shown = [carousel.next_tip().id for _ in range(2)]
        assert shown == ["b", "a"]


class TestJsonFileBagStore:
    """Tests for file-backed bag persistence."""

    def test_missing_file_loads_nothing(self, tmp_path):
        assert JsonFileBagStore(tmp_path / "bag.json").load() is None

    def test_save_then_load(self, tmp_path):
        store = JsonFileBagStore(tmp_path / "nested" / "bag.json")
        store.save(TipBag(ids=["b", "a"], cycle=["a", "b"]))
        assert store.load() == TipBag(ids=["b", "a"], cycle=["a", "b"])

    def test_uses_versioned_key(self, tmp_path):
        path = tmp_path / "bag.json"
        JsonFileBagStore(path).save(TipBag(ids=["a"], cycle=["a"]))
        assert BAG_KEY == "edufin_tip_bag_v1"
        assert json.loads(path.read_text())[BAG_KEY]["ids"] == ["a"]

    def test_keeps_other_keys(self, tmp_path):
        path = tmp_path / "bag.json"
        path.write_text(json.dumps({"theme": "dark"}))
        JsonFileBagStore(path).save(TipBag(ids=["a"], cycle=["a"]))
        assert json.loads(path.read_text())["theme"] == "dark"

    def test_corrupt_file_loads_nothing(self, tmp_path):
        path = tmp_path / "bag.json"
        path.write_text("{not json")
        assert JsonFileBagStore(path).load() is None

    def test_malformed_entry_loads_nothing(self, tmp_path):
        path = tmp_path / "bag.json"
        path.write_text(json.dumps({BAG_KEY: {"ids": "abc"}}))
        assert JsonFileBagStore(path).load() is None

    def test_carousel_over_file_store(self, tmp_path):
        path = tmp_path / "bag.json"
        carousel = TipCarousel(make_tips(IDS), JsonFileBagStore(path), random.Random(30))
        carousel.next_tip()
        stored = JsonFileBagStore(path).load()
        assert len(stored.ids) == 4

    def test_owners_sharing_a_file_keep_separate_cycles(self, tmp_path):
        path = tmp_path / "bag.json"
        tips = make_tips(["0", "1", "2", "3", "4", "5"])
        alice = TipCarousel(tips, JsonFileBagStore(path, key=bag_key("user:alice")), random.Random(31))
        bob = TipCarousel(tips, JsonFileBagStore(path, key=bag_key("user:bob")), random.Random(32))

        bob_seen = []
        for _ in range(3):
            alice.next_tip()
            bob_seen.append(bob.next_tip().id)
        bob_seen.extend(bob.next_tip().id for _ in range(3))

        assert sorted(bob_seen) == ["0", "1", "2", "3", "4", "5"]
        assert bob.progress == (6, 6)
        assert alice.progress == (3, 6)
        assert set(json.loads(path.read_text())) == {bag_key("user:alice"), bag_key("user:bob")}

    def test_owner_key_is_versioned(self):
        assert bag_key("browser:abc") == "edufin_tip_bag_v1:browser:abc"

    def test_io_failure_propagates(self, tmp_path):
        path = tmp_path / "bag.json"
        path.mkdir()
        with pytest.raises(OSError):
            JsonFileBagStore(path).load()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
