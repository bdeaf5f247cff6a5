from typing import Optional

import logging

from ..models import CVECacheEntry

logger = logging.getLogger("ecu-reporter")

CVE_CACHE_TABLE = "cve_cache"


class CVECacheAPI:
    """
    CVE Cache Store Operations.

    The cache is global (not scan-scoped) and holds at most one row per CVE id.
    """

    def get_cve_cache_entry(self, cve_id: str) -> Optional[CVECacheEntry]:
        row = self.get(CVE_CACHE_TABLE, "cve_id", cve_id)
        return CVECacheEntry.from_row(row) if row else None

    def upsert_cve_cache_entry(self, entry: CVECacheEntry) -> CVECacheEntry:
        """Insert or replace the cache row for ``entry.cve_id``."""
        logger.debug(f"Upserting cache entry for {entry.cve_id}")
        self.upsert(CVE_CACHE_TABLE, entry.to_row(), on_conflict="cve_id")
        return entry
