import logging
import requests
from typing import Any, Dict, Optional

from ..exceptions import ApiError, NetworkError

logger = logging.getLogger("ecu-reporter")

NVD_API_URL = "https://services.nvd.nist.gov/rest/json/cves/2.0"
REQUEST_TIMEOUT = 30  # seconds
USER_AGENT = "ECU-Reporter/1.0"


class NVDAPI:
    """
    Client for the NVD CVE API 2.0.

    One attempt per call: there is no retry loop, the caller decides how to
    degrade when the registry is unavailable.
    """

    def __init__(self, api_url: str = NVD_API_URL, api_key: Optional[str] = None, timeout: int = REQUEST_TIMEOUT):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    def fetch_cve(self, cve_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the raw ``cve`` object for one identifier.

        Returns:
            The first matching ``cve`` record, or None when the registry reports no match.

        Raises:
            NetworkError: If the registry cannot be reached or times out.
            ApiError: If the registry answers with a non-success status or an undecodable body.
        """
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if self.api_key:
            headers["apiKey"] = self.api_key

        logger.info(f"Fetching CVE {cve_id} from NVD...")
        try:
            response = self.session.get(
                self.api_url,
                params={"cveId": cve_id},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"NVD request for {cve_id} timed out", details={"error": str(e)})
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Failed to reach NVD for {cve_id}: {e}", details={"error": str(e)})

        if not response.ok:
            logger.error(f"NVD API error: {response.status_code}")
            raise ApiError(
                f"NVD returned status {response.status_code} for {cve_id}",
                code="nvd_error",
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON received from NVD for {cve_id}: {e}", code="nvd_invalid_json")

        vulnerabilities = data.get("vulnerabilities") if isinstance(data, dict) else None
        if not vulnerabilities:
            return None
        return vulnerabilities[0].get("cve")
