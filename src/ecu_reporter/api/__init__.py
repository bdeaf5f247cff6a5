# ecu_reporter/api/__init__.py

from .store_api import StoreAPI, InMemoryStoreAPI
from .nvd_api import NVDAPI

__all__ = ['StoreAPI', 'InMemoryStoreAPI', 'NVDAPI']
