"""
Cache-aside CVE resolution against the NVD.

A cached entry younger than the TTL is returned without contacting the NVD.
An older (or missing) entry triggers one upstream fetch; a successful fetch is
upserted and returned, while an upstream failure falls back to the stale entry
when one exists.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterator, Optional, Tuple, TYPE_CHECKING

from ...exceptions import (
    ApiError,
    CVENotFoundError,
    NetworkError,
    UpstreamUnavailableError,
    ValidationError,
)
from ...models import CVECacheEntry
from .cve_data_gathering import parse_nvd_cve

if TYPE_CHECKING:
    from ...api.cve_cache_api import CVECacheAPI
    from ...api.nvd_api import NVDAPI

logger = logging.getLogger(__name__)

CVE_CACHE_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CVEResolver:
    """
    Resolves CVE identifiers to enriched cache entries.

    With ``single_flight`` enabled, concurrent resolutions of the same id in
    this process are serialized so that only the first one reaches the NVD;
    the others find the fresh entry it wrote.
    """

    def __init__(
        self,
        store: "CVECacheAPI",
        nvd: "NVDAPI",
        ttl: timedelta = CVE_CACHE_TTL,
        single_flight: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.nvd = nvd
        self.ttl = ttl
        self.single_flight = single_flight
        self.clock = clock
        # cve_id -> (lock, number of callers holding or waiting on it)
        self._key_locks: Dict[str, Tuple[threading.Lock, int]] = {}
        self._key_locks_guard = threading.Lock()

    @contextmanager
    def _key_lock(self, cve_id: str) -> Iterator[None]:
        """Hold the per-id lock; the entry is dropped once nobody uses it."""
        with self._key_locks_guard:
            lock, users = self._key_locks.get(cve_id, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._key_locks[cve_id] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._key_locks_guard:
                lock, users = self._key_locks[cve_id]
                if users == 1:
                    del self._key_locks[cve_id]
                else:
                    self._key_locks[cve_id] = (lock, users - 1)

    def _fresh(self, entry: Optional[CVECacheEntry]) -> bool:
        return entry is not None and entry.age(self.clock()) < self.ttl.total_seconds()

    def resolve(self, cve_id: str) -> CVECacheEntry:
        """
        Resolve one CVE id.

        Raises:
            ValidationError: If cve_id is empty
            CVENotFoundError: If the NVD has no record for the id
            UpstreamUnavailableError: If the NVD fails and nothing is cached
        """
        if not cve_id:
            raise ValidationError("CVE ID required", code="missing_cve_id")

        cached = self.store.get_cve_cache_entry(cve_id)
        if self._fresh(cached):
            logger.info(f"Returning cached CVE data for {cve_id}")
            return cached

        if not self.single_flight:
            return self._refresh(cve_id, cached)

        with self._key_lock(cve_id):
            # Another caller may have refreshed the entry while we waited
            cached = self.store.get_cve_cache_entry(cve_id)
            if self._fresh(cached):
                logger.info(f"Returning cached CVE data for {cve_id}")
                return cached
            return self._refresh(cve_id, cached)

    def _refresh(self, cve_id: str, cached: Optional[CVECacheEntry]) -> CVECacheEntry:
        try:
            cve = self.nvd.fetch_cve(cve_id)
        except (NetworkError, ApiError) as e:
            if cached is not None:
                logger.warning(f"NVD unavailable for {cve_id}, serving stale cache entry: {e.message}")
                return cached
            raise UpstreamUnavailableError(
                "Failed to fetch from NVD",
                code="nvd_unavailable",
                details={"cve_id": cve_id, "error": e.message},
            ) from e

        if cve is None:
            raise CVENotFoundError("CVE not found", code="cve_not_found", details={"cve_id": cve_id})

        entry = parse_nvd_cve(cve_id, cve, self.clock())
        self.store.upsert_cve_cache_entry(entry)
        logger.info(f"Cached CVE data for {cve_id}")
        return entry
