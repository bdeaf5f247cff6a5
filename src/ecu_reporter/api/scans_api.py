from typing import List, Optional

import logging

from ..exceptions import ScanNotFoundError
from ..models import (
    AnalysisLog,
    ComplianceResult,
    SBOMComponent,
    Scan,
    Vulnerability,
)

logger = logging.getLogger("ecu-reporter")


class ScansAPI:
    """
    Scan Store Operations.

    Typed reads over the scan-scoped tables. Relies on the ``get`` and
    ``list_by_parent`` primitives of the store it is composed with.
    """

    def find_scan(self, scan_id: str) -> Optional[Scan]:
        """
        Retrieves a scan by id.

        Returns:
            Optional[Scan]: The scan, or None if no such scan exists.

        Raises:
            ApiError: If there are store issues.
            NetworkError: If there are network issues.
            DataError: If the stored row is malformed.
        """
        logger.debug(f"Fetching scan '{scan_id}'...")
        row = self.get("scans", "id", scan_id)
        return Scan.from_row(row) if row else None

    def get_scan(self, scan_id: str) -> Scan:
        """
        Retrieves a scan by id, failing when it does not exist.

        Raises:
            ScanNotFoundError: If the scan doesn't exist.
        """
        scan = self.find_scan(scan_id)
        if scan is None:
            raise ScanNotFoundError(f"Scan '{scan_id}' not found", details={"scan_id": scan_id})
        return scan

    def list_vulnerabilities(self, scan_id: str) -> List[Vulnerability]:
        """
        Retrieves the vulnerabilities of a scan ordered by severity, critical first.
        The sort is stable, so rows of equal severity keep the store's order.
        """
        rows = self.list_by_parent("vulnerabilities", "scan_id", scan_id)
        vulnerabilities = [Vulnerability.from_row(row) for row in rows]
        vulnerabilities.sort(key=lambda vuln: vuln.severity.ordinal)
        logger.debug(f"Found {len(vulnerabilities)} vulnerabilities for scan '{scan_id}'")
        return vulnerabilities

    def list_compliance_results(self, scan_id: str) -> List[ComplianceResult]:
        rows = self.list_by_parent("compliance_results", "scan_id", scan_id)
        return [ComplianceResult.from_row(row) for row in rows]

    def list_sbom_components(self, scan_id: str) -> List[SBOMComponent]:
        rows = self.list_by_parent("sbom_components", "scan_id", scan_id)
        return [SBOMComponent.from_row(row) for row in rows]

    def list_analysis_logs(self, scan_id: str) -> List[AnalysisLog]:
        """Retrieves the analysis log of a scan in chronological order."""
        rows = self.list_by_parent("analysis_logs", "scan_id", scan_id, order_by="created_at")
        return [AnalysisLog.from_row(row) for row in rows]
