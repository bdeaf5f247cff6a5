import logging

from .helpers.api_base import APIBase
from .helpers.memory_backend import InMemoryBackend
from .scans_api import ScansAPI
from .cve_cache_api import CVECacheAPI

# Assume logger is configured in main.py
logger = logging.getLogger("ecu-reporter")


class StoreAPI(ScansAPI, CVECacheAPI, APIBase):
    """
    Scan store client backed by the PostgREST endpoint of the store.
    This class composes the typed store operations over the REST transport.
    """
    pass


class InMemoryStoreAPI(ScansAPI, CVECacheAPI, InMemoryBackend):
    """
    Scan store backed by in-process dictionaries, loadable from a JSON dump.
    """
    pass
