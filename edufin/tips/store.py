"""
Tip Bag Persistence

The bag is client-side state: one per browser (or per Streamlit session),
never shared between users and never sent to the API.

JsonFileBagStore keeps several named entries in one small JSON file, the
way a browser keeps several keys in local storage. Each owner gets its
own entry under bag_key(owner). A missing or malformed entry reads as
"no bag" and a fresh cycle starts; I/O failures propagate.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from edufin.models.content import TipBag


BAG_KEY = "edufin_tip_bag_v1"

logger = structlog.get_logger("edufin.tips")


def bag_key(owner: str) -> str:
    """Storage key for one user's or one browser session's bag."""
    return f"{BAG_KEY}:{owner}"


class BagStore(ABC):
    """Where a TipCarousel keeps its bag between page loads."""

    @abstractmethod
    def load(self) -> Optional[TipBag]:
        """Return the stored bag, or None if there is none usable."""
        pass

    @abstractmethod
    def save(self, bag: TipBag) -> None:
        pass


class MemoryBagStore(BagStore):
    """Keeps the bag in process. Used for a Streamlit session and tests."""

    def __init__(self, bag: Optional[TipBag] = None):
        self.bag = bag

    def load(self) -> Optional[TipBag]:
        return self.bag.model_copy(deep=True) if self.bag else None

    def save(self, bag: TipBag) -> None:
        self.bag = bag.model_copy(deep=True)


class JsonFileBagStore(BagStore):
    """Bag stored under a key in a JSON file."""

    def __init__(self, path: Path, key: str = BAG_KEY):
        self._path = Path(path)
        self._key = key

    def _read_all(self) -> dict:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except ValueError as e:
            logger.warning("tip_bag_unreadable", path=str(self._path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Optional[TipBag]:
        raw = self._read_all().get(self._key)
        if raw is None:
            return None
        try:
            return TipBag.model_validate(raw)
        except ValidationError as e:
            logger.warning("tip_bag_invalid", key=self._key, error=str(e))
            return None

    def save(self, bag: TipBag) -> None:
        data = self._read_all()
        data[self._key] = bag.model_dump()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data), encoding="utf-8")
