from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StoreBase(ABC):
    """
    Read/write contract the reporter needs from the scan store.

    Rows are plain dictionaries keyed by column name. Implementations decide
    how a table is reached (REST endpoint, in-memory dictionary, ...); the
    typed mixins in ``scans_api`` and ``cve_cache_api`` only use these three
    primitives.
    """

    @abstractmethod
    def get(self, table: str, key_field: str, key: Any) -> Optional[Dict[str, Any]]:
        """Return the single row whose ``key_field`` equals ``key``, or None."""

    @abstractmethod
    def list_by_parent(
        self,
        table: str,
        parent_field: str,
        parent_id: Any,
        order_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Return every row referencing ``parent_id``, ascending by ``order_by`` when given."""

    @abstractmethod
    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        """Insert ``row`` or replace the existing row with the same ``on_conflict`` value."""
