# ecu_reporter/__init__.py
"""
ECU Reporter package
"""

__version__ = "1.0.0"

from .api import StoreAPI, InMemoryStoreAPI, NVDAPI

__all__ = ['StoreAPI', 'InMemoryStoreAPI', 'NVDAPI', '__version__']
