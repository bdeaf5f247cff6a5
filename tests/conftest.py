import copy
import json
from datetime import datetime, timezone

import pytest
import requests
from unittest.mock import MagicMock

from ecu_reporter.api import InMemoryStoreAPI
from ecu_reporter.models import SBOMComponent, Scan

SCAN_ID = "3f6c2a7e-5d1b-4c8e-9a0f-1b2c3d4e5f60"
FIXED_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

SCAN_ROW = {
    "id": SCAN_ID,
    "ecu_name": "BrakeController",
    "ecu_type": "ABS",
    "version": "2.4.1",
    "manufacturer": "Acme Automotive",
    "architecture": "ARM Cortex-M4",
    "file_name": "brake_fw_2.4.1.bin",
    "file_hash": "9f86d081884c7d659a2feaa0c55ad015",
    "file_size": 524288,
    "status": "completed",
    "risk_score": 72,
    "executive_summary": "Two high severity issues in the CAN message parser.",
    "created_at": "2024-02-29T09:00:00Z",
    "completed_at": "2024-02-29T09:05:00Z",
}

# Stored out of severity order on purpose
VULNERABILITY_ROWS = [
    {"id": "v-low", "scan_id": SCAN_ID, "severity": "low", "title": "Verbose debug output",
     "status": "new", "cvss_score": 3.1},
    {"id": "v-high-1", "scan_id": SCAN_ID, "severity": "high", "title": "Unchecked CAN frame length",
     "cve_id": "CVE-2023-1111", "cwe_id": "CWE-120", "cvss_score": 8.1,
     "description": "memcpy with attacker-controlled length",
     "affected_component": "can_rx", "affected_function": "can_rx_handler",
     "code_snippet": "memcpy(buf, frame->data, frame->len);", "line_number": 88,
     "detection_method": "static_analysis", "remediation": "Bound the copy by sizeof(buf)."},
    {"id": "v-critical", "scan_id": SCAN_ID, "severity": "critical", "title": "Hardcoded diagnostic key",
     "cve_id": "CVE-2023-2222", "cvss_score": 9.8},
    {"id": "v-high-2", "scan_id": SCAN_ID, "severity": "high", "title": "Integer overflow in UDS handler",
     "cvss_score": 7.0},
]

COMPLIANCE_ROWS = [
    {"scan_id": SCAN_ID, "framework": "ISO 21434", "rule_id": "RQ-05-01", "status": "pass"},
    {"scan_id": SCAN_ID, "framework": "ISO 21434", "rule_id": "RQ-05-02", "status": "pass"},
    {"scan_id": SCAN_ID, "framework": "UNECE R155", "rule_id": "7.2.2.2", "status": "pass"},
    {"scan_id": SCAN_ID, "framework": "UNECE R155", "rule_id": "7.3.7", "status": "fail",
     "details": "No secure boot chain"},
]

SBOM_ROWS = [
    {"scan_id": SCAN_ID, "component_name": "zlib", "version": "1.2.11", "license": "Zlib",
     "source_file": "lib/zlib.a", "vulnerabilities": ["CVE-2018-25032"]},
    {"scan_id": SCAN_ID, "component_name": "mbedtls", "version": "2.16.0", "license": "Apache-2.0",
     "source_file": "lib/mbedtls.a", "vulnerabilities": ["CVE-2020-10932", "CVE-2020-36421"]},
    {"scan_id": SCAN_ID, "component_name": "freertos", "version": None, "license": None,
     "source_file": None, "vulnerabilities": []},
]

# Stored out of chronological order on purpose
ANALYSIS_LOG_ROWS = [
    {"scan_id": SCAN_ID, "stage": "sbom", "log_level": "info", "message": "3 components",
     "created_at": "2024-02-29T09:03:00Z"},
    {"scan_id": SCAN_ID, "stage": "unpack", "log_level": "info", "message": "Image unpacked",
     "created_at": "2024-02-29T09:01:00Z"},
    {"scan_id": SCAN_ID, "stage": "analysis", "log_level": "warning", "message": "Stripped binary",
     "created_at": "2024-02-29T09:02:00Z"},
]


@pytest.fixture
def scan_row():
    return dict(SCAN_ROW)


@pytest.fixture
def store_tables():
    """Table dump of one completed scan (four findings, 3/4 compliance, three components)."""
    return copy.deepcopy({
        "scans": [SCAN_ROW],
        "vulnerabilities": VULNERABILITY_ROWS,
        "compliance_results": COMPLIANCE_ROWS,
        "sbom_components": SBOM_ROWS,
        "analysis_logs": ANALYSIS_LOG_ROWS,
        "cve_cache": [],
    })


@pytest.fixture
def memory_store(store_tables):
    return InMemoryStoreAPI(store_tables)


@pytest.fixture
def sample_scan():
    return Scan.from_row(SCAN_ROW)


@pytest.fixture
def sample_components():
    return [SBOMComponent.from_row(row) for row in SBOM_ROWS]


@pytest.fixture
def fixed_time():
    return FIXED_TIME


@pytest.fixture
def mock_session(mocker):
    """
    Create a mock requests.Session that can be used in place of the real session.
    """
    mock_session = MagicMock(spec=requests.Session)
    mock_response = MagicMock(spec=requests.Response)
    mock_response.status_code = 200
    mock_response.ok = True
    mock_response.text = '[]'
    mock_response.json.return_value = []
    mock_session.request.return_value = mock_response
    mock_session.get.return_value = mock_response
    return mock_session


@pytest.fixture
def make_response():
    """Factory for mocked requests.Response objects."""
    def _make(status_code=200, json_data=None, text=None, reason="OK"):
        response = MagicMock(spec=requests.Response)
        response.status_code = status_code
        response.ok = status_code < 400
        response.reason = reason
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        response.text = text
        if json_data is not None:
            response.json.return_value = json_data
        else:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        return response
    return _make
