import json
import logging
import requests
from typing import Any, Dict, List, Optional

from ...exceptions import (
    ApiError,
    NetworkError,
    ConfigurationError,
)
from .store_base import StoreBase

# Assume logger is configured in main.py
logger = logging.getLogger("ecu-reporter")

REST_PATH = "/rest/v1"


class APIBase(StoreBase):
    """
    Store client speaking the PostgREST dialect exposed by Supabase.
    Contains methods that handle the "how" of store operations.
    """

    def __init__(self, store_url: str, store_key: str, timeout: int = 30):
        """
        Initialize the store client with its endpoint and service key.

        Args:
            store_url: Base URL of the store (the REST path is appended if missing)
            store_key: Service key sent as both apikey and bearer token
            timeout: Request timeout in seconds
        """
        if not store_url:
            raise ConfigurationError("A store URL is required to reach the scan store")
        if not store_key:
            raise ConfigurationError("A store key is required to reach the scan store")

        # Ensure the store URL points at the REST endpoint
        store_url = store_url.rstrip('/')
        if not store_url.endswith(REST_PATH):
            self.store_url = store_url + REST_PATH
            logger.debug("Store URL adjusted to: %s", self.store_url)
        else:
            self.store_url = store_url
        self.store_key = store_key
        self.timeout = timeout
        self.session = requests.Session()  # Use a session for connection reuse
        self.session.trust_env = False # Do not trust .netrc file

## General Store Operations
    def _send_request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """
        Sends a request to one table of the store and returns the decoded JSON.

        Raises:
            NetworkError: For connection issues, timeouts, etc.
            ApiError: For non-success responses or undecodable bodies
        """
        url = f"{self.store_url}/{table}"
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json; charset=utf-8",
            "apikey": self.store_key,
            "Authorization": f"Bearer {self.store_key}",
        }
        if prefer:
            headers["Prefer"] = prefer

        req_body = json.dumps(body) if body is not None else None
        logger.debug("Store request: %s %s params=%s", method, url, params)
        logger.debug("Request Body: %s", req_body)

        try:
            response = self.session.request(
                method, url, headers=headers, params=params, data=req_body, timeout=self.timeout
            )
        except requests.exceptions.ConnectionError as e:
            logger.error("Store connection failed: %s", e, exc_info=True)
            raise NetworkError("Failed to connect to the scan store", details={"error": str(e)})
        except requests.exceptions.Timeout as e:
            logger.error("Store request timed out: %s", e, exc_info=True)
            raise NetworkError("Request to the scan store timed out", details={"error": str(e)})
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error while calling the scan store: {e}") from e

        logger.debug("Response Status Code: %s", response.status_code)
        logger.debug(f"Response Text (first 500 chars): {response.text[:500] if hasattr(response, 'text') else '(No text)'}")

        if not response.ok:
            error_msg, error_code = self._extract_error(response)
            logger.error(f"Store returned {response.status_code} for {method} {table}: {error_msg}")
            raise ApiError(
                f"Store request failed ({response.status_code}): {error_msg}",
                code=error_code,
                details={"table": table, "status_code": response.status_code},
            )

        if not response.text:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Failed to decode JSON response from store: {response.text[:500]}", exc_info=True)
            raise ApiError(f"Invalid JSON received from store: {e}", details={"response_text": response.text[:500]})

    @staticmethod
    def _extract_error(response: requests.Response) -> tuple:
        """Pull the message and code out of a PostgREST error body when there is one."""
        try:
            payload = response.json()
        except ValueError:
            return (response.text[:200] or response.reason or "Unknown store error"), None
        if isinstance(payload, dict):
            return payload.get("message") or payload.get("error") or "Unknown store error", payload.get("code")
        return str(payload), None

    def get(self, table: str, key_field: str, key: Any) -> Optional[Dict[str, Any]]:
        rows = self._send_request(
            "GET", table, params={key_field: f"eq.{key}", "select": "*", "limit": "1"}
        )
        if not rows:
            return None
        return rows[0]

    def list_by_parent(
        self,
        table: str,
        parent_field: str,
        parent_id: Any,
        order_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {parent_field: f"eq.{parent_id}", "select": "*"}
        if order_by:
            params["order"] = f"{order_by}.asc"
        return self._send_request("GET", table, params=params) or []

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        result = self._send_request(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            body=row,
            prefer="resolution=merge-duplicates,return=representation",
        )
        if isinstance(result, list) and result:
            return result[0]
        return row
