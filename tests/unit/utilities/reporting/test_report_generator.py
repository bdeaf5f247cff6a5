# tests/unit/utilities/reporting/test_report_generator.py

import json
import logging

import pytest

from ecu_reporter.api import InMemoryStoreAPI
from ecu_reporter.exceptions import ScanNotFoundError, ValidationError
from ecu_reporter.utilities.reporting.report_generator import (
    compute_compliance_score,
    generate_report,
    normalize_report_format,
)

SCAN_ID = "3f6c2a7e-5d1b-4c8e-9a0f-1b2c3d4e5f60"


class TestNormalizeReportFormat:
    @pytest.mark.parametrize("value, expected", [("json", "json"), ("MARKDOWN", "markdown"), (None, "json")])
    def test_accepted_formats(self, value, expected):
        assert normalize_report_format(value) == expected

    def test_pdf_is_served_as_json_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert normalize_report_format("pdf") == "json"
        assert "deprecated" in caplog.text

    def test_unknown_format_is_rejected(self):
        with pytest.raises(ValidationError, match="Invalid report format 'xml'"):
            normalize_report_format("xml")


class TestComplianceScore:
    def test_no_results_scores_zero(self):
        assert compute_compliance_score({"pass": 0, "fail": 0, "warning": 0}) == 0

    def test_three_of_four(self):
        assert compute_compliance_score({"pass": 3, "fail": 1, "warning": 0}) == 75

    def test_rounds_half_up(self):
        # 1/8 = 12.5%
        assert compute_compliance_score({"pass": 1, "fail": 7, "warning": 0}) == 13

    def test_two_of_three(self):
        assert compute_compliance_score({"pass": 2, "fail": 0, "warning": 1}) == 67


class TestGenerateJsonReport:
    def test_summary(self, memory_store, fixed_time):
        document = generate_report(memory_store, SCAN_ID, "json", generated_at=fixed_time)
        report = json.loads(document.body)
        summary = report["summary"]

        assert summary["vulnerability_breakdown"] == {"critical": 1, "high": 2, "medium": 0, "low": 1, "info": 0}
        assert summary["total_vulnerabilities"] == sum(summary["vulnerability_breakdown"].values()) == 4
        assert summary["compliance_breakdown"] == {"pass": 3, "fail": 1, "warning": 0}
        assert summary["compliance_score"] == 75
        assert summary["sbom_components_count"] == 3
        assert report["generated_at"] == "2024-03-01T12:00:00+00:00"

    def test_delivery_hints(self, memory_store):
        document = generate_report(memory_store, SCAN_ID, "json")
        assert document.filename == f"scan-report-{SCAN_ID}.json"
        assert document.content_type == "application/json"

    def test_lists_are_ordered(self, memory_store):
        report = json.loads(generate_report(memory_store, SCAN_ID).body)
        assert [v["severity"] for v in report["vulnerabilities"]] == ["critical", "high", "high", "low"]
        assert [entry["stage"] for entry in report["analysis_timeline"]] == ["unpack", "analysis", "sbom"]
        assert report["analysis_timeline"][1] == {
            "stage": "analysis",
            "level": "warning",
            "message": "Stripped binary",
            "timestamp": "2024-02-29T09:02:00Z",
        }

    def test_scan_metadata(self, memory_store):
        report = json.loads(generate_report(memory_store, SCAN_ID).body)
        assert report["scan"]["id"] == SCAN_ID
        assert report["scan"]["risk_score"] == 72.0
        assert report["sbom"][0]["vulnerabilities"] == ["CVE-2018-25032"]

    def test_pdf_produces_json(self, memory_store):
        document = generate_report(memory_store, SCAN_ID, "pdf")
        assert document.content_type == "application/json"
        assert json.loads(document.body)["scan"]["id"] == SCAN_ID

    def test_scan_without_findings(self, scan_row):
        store = InMemoryStoreAPI({"scans": [scan_row]})
        report = json.loads(generate_report(store, scan_row["id"]).body)

        assert report["summary"]["total_vulnerabilities"] == 0
        assert report["summary"]["compliance_score"] == 0
        assert report["vulnerabilities"] == []
        assert report["analysis_timeline"] == []


class TestGenerateReportFailures:
    def test_missing_scan_id(self, memory_store):
        with pytest.raises(ValidationError, match="Scan ID required"):
            generate_report(memory_store, "")

    def test_unknown_scan(self, memory_store):
        with pytest.raises(ScanNotFoundError):
            generate_report(memory_store, "does-not-exist")

    def test_invalid_format_does_not_touch_store(self, mocker):
        store = mocker.MagicMock()
        with pytest.raises(ValidationError):
            generate_report(store, SCAN_ID, "xml")
        store.get_scan.assert_not_called()


class TestGenerateMarkdownReport:
    def test_delivery_hints(self, memory_store):
        document = generate_report(memory_store, SCAN_ID, "markdown")
        assert document.filename == f"scan-report-{SCAN_ID}.md"
        assert document.content_type == "text/markdown"

    def test_summary_tables(self, memory_store, fixed_time):
        body = generate_report(memory_store, SCAN_ID, "markdown", generated_at=fixed_time).body

        assert body.startswith("# ECU Vulnerability Scan Report\n")
        assert "Generated: 2024-03-01T12:00:00+00:00" in body
        assert "- **Risk Score:** 72/100" in body
        assert "| Critical | 1 |" in body
        assert "| High | 2 |" in body
        assert "| **Total** | **4** |" in body
        assert "| **Score** | **75%** |" in body
        assert body.rstrip().endswith("*Report generated by ECU Vulnerability Scanner*")
