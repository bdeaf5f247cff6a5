import copy
import json
import logging
import threading
from typing import Any, Dict, List, Optional

from ...exceptions import FileSystemError, ValidationError
from .store_base import StoreBase

logger = logging.getLogger("ecu-reporter")


class InMemoryBackend(StoreBase):
    """
    Dictionary-backed store. Tables are lists of row dictionaries.

    Rows are copied on the way in and out so callers never share mutable
    state with the store.
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str) -> "InMemoryBackend":
        """Load a JSON dump shaped as ``{"<table>": [<row>, ...], ...}``."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise FileSystemError(f"Data file does not exist: {path}")
        except json.JSONDecodeError as e:
            raise ValidationError(f"Data file is not valid JSON: {path}: {e.msg}")
        except OSError as e:
            raise FileSystemError(f"Unable to read data file {path}: {e}")

        if not isinstance(data, dict) or not all(isinstance(rows, list) for rows in data.values()):
            raise ValidationError(f"Data file must map table names to lists of rows: {path}")
        logger.debug(f"Loaded {sum(len(rows) for rows in data.values())} rows from {path}")
        return cls(data)

    def get(self, table: str, key_field: str, key: Any) -> Optional[Dict[str, Any]]:
        with self._lock:
            for row in self._tables.get(table, []):
                if row.get(key_field) == key:
                    return copy.deepcopy(row)
        return None

    def list_by_parent(
        self,
        table: str,
        parent_field: str,
        parent_id: Any,
        order_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [copy.deepcopy(row) for row in self._tables.get(table, []) if row.get(parent_field) == parent_id]
        if order_by:
            # Rows without the ordering column sort last, as NULLS LAST would
            rows.sort(key=lambda row: (row.get(order_by) is None, row.get(order_by) or ""))
        return rows

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        stored = copy.deepcopy(row)
        with self._lock:
            rows = self._tables.setdefault(table, [])
            for index, existing in enumerate(rows):
                if existing.get(on_conflict) == row.get(on_conflict):
                    rows[index] = stored
                    break
            else:
                rows.append(stored)
        return copy.deepcopy(stored)
