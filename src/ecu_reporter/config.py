# ecu_reporter/config.py

import os
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

from .exceptions import ConfigurationError
from .api.nvd_api import NVD_API_URL, REQUEST_TIMEOUT

logger = logging.getLogger("ecu-reporter")

DEFAULT_CVE_CACHE_TTL_HOURS = 24.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (got '{value}')")


def _parse_positive_number(name: str, value: Optional[str], default: float) -> float:
    if value is None or value.strip() == "":
        return default
    try:
        number = float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number (got '{value}')")
    if number <= 0:
        raise ConfigurationError(f"{name} must be greater than zero (got '{value}')")
    return number


@dataclass
class Settings:
    """Runtime configuration shared by the CLI and the HTTP server."""
    store_url: Optional[str] = None
    store_key: Optional[str] = None
    data_file: Optional[str] = None
    nvd_api_url: str = NVD_API_URL
    nvd_api_key: Optional[str] = None
    nvd_timeout: float = REQUEST_TIMEOUT
    cve_cache_ttl_hours: float = DEFAULT_CVE_CACHE_TTL_HOURS
    cve_single_flight: bool = True

    @property
    def cve_cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cve_cache_ttl_hours)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If a numeric or boolean variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        settings = cls(
            store_url=env.get("ECU_STORE_URL") or None,
            store_key=env.get("ECU_STORE_KEY") or None,
            data_file=env.get("ECU_DATA_FILE") or None,
            nvd_api_url=env.get("NVD_API_URL") or NVD_API_URL,
            nvd_api_key=env.get("NVD_API_KEY") or None,
            nvd_timeout=_parse_positive_number("NVD_TIMEOUT", env.get("NVD_TIMEOUT"), REQUEST_TIMEOUT),
            cve_cache_ttl_hours=_parse_positive_number(
                "CVE_CACHE_TTL_HOURS", env.get("CVE_CACHE_TTL_HOURS"), DEFAULT_CVE_CACHE_TTL_HOURS
            ),
            cve_single_flight=_parse_bool("CVE_SINGLE_FLIGHT", env.get("CVE_SINGLE_FLIGHT"), True),
        )
        logger.debug(
            f"Settings loaded: store_url={settings.store_url}, data_file={settings.data_file}, "
            f"cve_cache_ttl_hours={settings.cve_cache_ttl_hours}"
        )
        return settings

    def build_store(self):
        """
        Construct the scan store named by this configuration.

        A store URL takes precedence over a data file.

        Raises:
            ConfigurationError: If neither a store URL nor a data file is configured
        """
        from .api import StoreAPI, InMemoryStoreAPI

        if self.store_url:
            return StoreAPI(self.store_url, self.store_key)
        if self.data_file:
            return InMemoryStoreAPI.from_file(self.data_file)
        raise ConfigurationError(
            "No scan store configured. Provide --store-url and --store-key "
            "(or ECU_STORE_URL / ECU_STORE_KEY), or --data-file (ECU_DATA_FILE)."
        )

    def build_nvd_client(self):
        from .api import NVDAPI

        return NVDAPI(api_url=self.nvd_api_url, api_key=self.nvd_api_key, timeout=self.nvd_timeout)
