import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

from price_aggregator.core.logging import get_logger

logger = get_logger(__name__)


def normalize_item_name(item_name: str) -> str:
    """Mapping keys are compared trimmed and lowercased."""
    return item_name.strip().lower()


class OfferMapping:
    """
    Static item name -> vendor product identifier mapping.

    Read-only once built. A name with no entry maps to an empty tuple,
    which is a normal condition rather than an error.
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None):
        self._entries: Dict[str, Tuple[str, ...]] = {}
        for name, ids in (entries or {}).items():
            if not isinstance(name, str) or not isinstance(ids, list):
                logger.warning(f"Ignoring offer mapping entry for {name!r}: expected a list of ids")
                continue
            self._entries[normalize_item_name(name)] = tuple(str(i) for i in ids)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "OfferMapping":
        """
        Builds a mapping from its serialized JSON form.

        Invalid JSON yields an empty mapping so a bad deployment value
        disables the vendor rather than the service.
        """
        if not raw or not raw.strip():
            return cls()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse offer id mapping, ensure it contains valid JSON: {e}")
            return cls()
        if not isinstance(data, dict):
            logger.warning("Offer id mapping must be a JSON object, ignoring it")
            return cls()
        return cls(data)

    def lookup(self, item_name: str) -> List[str]:
        return list(self._entries.get(normalize_item_name(item_name), ()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_name: object) -> bool:
        return isinstance(item_name, str) and normalize_item_name(item_name) in self._entries
