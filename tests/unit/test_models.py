# tests/unit/test_models.py

from datetime import datetime, timedelta, timezone

import pytest

from ecu_reporter.exceptions import DataError
from ecu_reporter.models import (
    CVECacheEntry,
    SBOMComponent,
    Scan,
    Severity,
    Vulnerability,
    VulnerabilityStatus,
    parse_timestamp,
)


class TestSeverity:
    def test_ordinal_follows_report_order(self):
        assert [s.ordinal for s in Severity] == [0, 1, 2, 3, 4]
        assert Severity.CRITICAL.ordinal < Severity.INFO.ordinal


class TestScan:
    def test_from_row_coerces_risk_score(self, scan_row):
        scan_row["risk_score"] = "64.5"
        assert Scan.from_row(scan_row).risk_score == 64.5

    def test_from_row_allows_missing_risk_score(self, scan_row):
        scan_row["risk_score"] = None
        assert Scan.from_row(scan_row).risk_score is None

    @pytest.mark.parametrize("score", [-1, 100.5])
    def test_from_row_rejects_out_of_range_risk_score(self, scan_row, score):
        scan_row["risk_score"] = score
        with pytest.raises(DataError, match="outside 0-100"):
            Scan.from_row(scan_row)


class TestVulnerability:
    def test_status_defaults_to_new(self):
        vuln = Vulnerability.from_row({"id": "v1", "scan_id": "s1", "severity": "medium", "title": "t"})
        assert vuln.status is VulnerabilityStatus.NEW

    def test_unknown_status_is_rejected(self):
        with pytest.raises(DataError) as exc_info:
            Vulnerability.from_row({"id": "v1", "scan_id": "s1", "severity": "low", "title": "t", "status": "wontfix"})
        assert exc_info.value.code == "invalid_enum_value"
        assert exc_info.value.details == {"field": "status", "value": "wontfix"}


def test_sbom_component_drops_empty_cve_ids():
    component = SBOMComponent.from_row(
        {"scan_id": "s1", "component_name": "zlib", "vulnerabilities": ["CVE-1", None, "", "CVE-2"]}
    )
    assert component.vulnerabilities == ["CVE-1", "CVE-2"]


class TestParseTimestamp:
    def test_z_suffix(self):
        assert parse_timestamp("2024-03-01T12:00:00Z") == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-03-01T12:00:00").tzinfo == timezone.utc

    def test_offset_preserved(self):
        parsed = parse_timestamp("2024-03-01T14:00:00+02:00")
        assert parsed == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text, micros", [
        ("2024-03-01T10:20:30.1+00:00", 100000),
        ("2024-03-01T10:20:30.12+00:00", 120000),
        ("2024-03-01T10:20:30.1234+00:00", 123400),
        ("2024-03-01T10:20:30.12345+00:00", 123450),
        ("2024-03-01T10:20:30.123456Z", 123456),
    ])
    def test_store_fraction_lengths(self, text, micros):
        assert parse_timestamp(text) == datetime(2024, 3, 1, 10, 20, 30, micros, tzinfo=timezone.utc)

    def test_empty_is_none(self):
        assert parse_timestamp("") is None

    def test_invalid(self):
        with pytest.raises(DataError, match="Invalid timestamp"):
            parse_timestamp("yesterday")


class TestCVECacheEntry:
    def test_age(self, fixed_time):
        entry = CVECacheEntry(cve_id="CVE-1", fetched_at=fixed_time)
        assert entry.age(fixed_time + timedelta(hours=2)) == 7200

    def test_from_row_requires_fetched_at(self):
        with pytest.raises(DataError, match="has no fetched_at"):
            CVECacheEntry.from_row({"cve_id": "CVE-1"})

    def test_row_round_trip(self, fixed_time):
        entry = CVECacheEntry(
            cve_id="CVE-1",
            fetched_at=fixed_time,
            description="d",
            cvss_score=7.5,
            severity="high",
            cwe_ids=["CWE-79"],
            reference_links=[{"url": "https://example.com", "source": "x", "tags": []}],
        )
        assert CVECacheEntry.from_row(entry.to_row()) == entry
