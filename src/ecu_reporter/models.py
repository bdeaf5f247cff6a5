# ecu_reporter/models.py

"""
Domain model for the ECU reporter.

Rows arrive from the store as plain dictionaries. Each dataclass exposes a
``from_row`` constructor that checks closed enumerations at the boundary, so
an unrecognized severity or status surfaces as a ``DataError`` instead of
leaking into a report.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from dateutil import parser

from .exceptions import DataError

E = TypeVar("E", bound=Enum)


class Severity(Enum):
    """Vulnerability severity, declared in report order (critical first)."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def ordinal(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = list(Severity)


class VulnerabilityStatus(Enum):
    NEW = "new"
    REOPENED = "reopened"
    FIXED = "fixed"
    FALSE_POSITIVE = "false_positive"
    RISK_ACCEPTED = "risk_accepted"


class ComplianceStatus(Enum):
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """Map a stored string onto a closed enumeration or raise DataError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DataError(
            f"Unrecognized {field_name} value {value!r} (expected one of: {allowed})",
            code="invalid_enum_value",
            details={"field": field_name, "value": value},
        )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the store. Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = parser.isoparse(str(value).strip())
        except (ValueError, OverflowError):
            raise DataError(f"Invalid timestamp {value!r}", code="invalid_timestamp")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise DataError(f"Invalid numeric value {value!r}", code="invalid_number")


@dataclass(frozen=True)
class Scan:
    id: str
    ecu_name: str
    ecu_type: Optional[str] = None
    version: Optional[str] = None
    manufacturer: Optional[str] = None
    architecture: Optional[str] = None
    file_name: Optional[str] = None
    file_hash: Optional[str] = None
    file_size: Optional[int] = None
    status: Optional[str] = None
    risk_score: Optional[float] = None
    executive_summary: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Scan":
        risk_score = _optional_float(row.get("risk_score"))
        if risk_score is not None and not 0 <= risk_score <= 100:
            raise DataError(f"Risk score {risk_score!r} is outside 0-100", code="invalid_risk_score")
        return cls(
            id=str(row["id"]),
            ecu_name=row.get("ecu_name") or "",
            ecu_type=row.get("ecu_type"),
            version=row.get("version"),
            manufacturer=row.get("manufacturer"),
            architecture=row.get("architecture"),
            file_name=row.get("file_name"),
            file_hash=row.get("file_hash"),
            file_size=row.get("file_size"),
            status=row.get("status"),
            risk_score=risk_score,
            executive_summary=row.get("executive_summary"),
            created_at=row.get("created_at"),
            completed_at=row.get("completed_at"),
        )


@dataclass(frozen=True)
class Vulnerability:
    id: str
    scan_id: str
    severity: Severity
    title: str
    status: VulnerabilityStatus = VulnerabilityStatus.NEW
    cve_id: Optional[str] = None
    cwe_id: Optional[str] = None
    cvss_score: Optional[float] = None
    description: Optional[str] = None
    affected_component: Optional[str] = None
    affected_function: Optional[str] = None
    code_snippet: Optional[str] = None
    line_number: Optional[int] = None
    detection_method: Optional[str] = None
    remediation: Optional[str] = None
    attack_vector: Optional[str] = None
    impact: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Vulnerability":
        return cls(
            id=str(row["id"]),
            scan_id=str(row["scan_id"]),
            severity=parse_enum(Severity, row.get("severity"), "severity"),
            title=row.get("title") or "",
            status=parse_enum(VulnerabilityStatus, row.get("status") or "new", "status"),
            cve_id=row.get("cve_id"),
            cwe_id=row.get("cwe_id"),
            cvss_score=_optional_float(row.get("cvss_score")),
            description=row.get("description"),
            affected_component=row.get("affected_component"),
            affected_function=row.get("affected_function"),
            code_snippet=row.get("code_snippet"),
            line_number=row.get("line_number"),
            detection_method=row.get("detection_method"),
            remediation=row.get("remediation"),
            attack_vector=row.get("attack_vector"),
            impact=row.get("impact"),
        )


@dataclass(frozen=True)
class ComplianceResult:
    scan_id: str
    framework: str
    rule_id: str
    status: ComplianceStatus
    rule_description: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ComplianceResult":
        return cls(
            scan_id=str(row["scan_id"]),
            framework=row.get("framework") or "",
            rule_id=row.get("rule_id") or "",
            status=parse_enum(ComplianceStatus, row.get("status"), "compliance status"),
            rule_description=row.get("rule_description"),
            details=row.get("details"),
        )


@dataclass(frozen=True)
class SBOMComponent:
    scan_id: str
    component_name: str
    version: Optional[str] = None
    license: Optional[str] = None
    source_file: Optional[str] = None
    vulnerabilities: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SBOMComponent":
        return cls(
            scan_id=str(row["scan_id"]),
            component_name=row.get("component_name") or "",
            version=row.get("version"),
            license=row.get("license"),
            source_file=row.get("source_file"),
            vulnerabilities=[cve for cve in (row.get("vulnerabilities") or []) if cve],
        )


@dataclass(frozen=True)
class AnalysisLog:
    scan_id: str
    stage: str
    log_level: str
    message: str
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AnalysisLog":
        return cls(
            scan_id=str(row["scan_id"]),
            stage=row.get("stage") or "",
            log_level=row.get("log_level") or "info",
            message=row.get("message") or "",
            created_at=row.get("created_at"),
        )


@dataclass
class CVECacheEntry:
    """Enriched NVD record, keyed by CVE id and shared across scans."""
    cve_id: str
    fetched_at: datetime
    description: str = ""
    cvss_score: Optional[float] = None
    severity: Optional[str] = None
    published_date: Optional[str] = None
    modified_date: Optional[str] = None
    reference_links: List[Dict[str, Any]] = field(default_factory=list)
    cwe_ids: List[str] = field(default_factory=list)
    affected_products: List[Any] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CVECacheEntry":
        fetched_at = parse_timestamp(row.get("fetched_at"))
        if fetched_at is None:
            raise DataError(f"Cache entry for {row.get('cve_id')} has no fetched_at", code="invalid_cache_entry")
        return cls(
            cve_id=row["cve_id"],
            fetched_at=fetched_at,
            description=row.get("description") or "",
            cvss_score=_optional_float(row.get("cvss_score")),
            severity=row.get("severity"),
            published_date=row.get("published_date"),
            modified_date=row.get("modified_date"),
            reference_links=list(row.get("reference_links") or []),
            cwe_ids=list(row.get("cwe_ids") or []),
            affected_products=list(row.get("affected_products") or []),
        )

    def age(self, now: datetime) -> float:
        """Seconds elapsed since the entry was fetched."""
        return (now - self.fetched_at).total_seconds()

    def to_row(self) -> Dict[str, Any]:
        return {
            "cve_id": self.cve_id,
            "description": self.description,
            "cvss_score": self.cvss_score,
            "severity": self.severity,
            "published_date": self.published_date,
            "modified_date": self.modified_date,
            "reference_links": self.reference_links,
            "cwe_ids": self.cwe_ids,
            "affected_products": self.affected_products,
            "fetched_at": self.fetched_at.isoformat(),
        }


@dataclass(frozen=True)
class RenderedDocument:
    """An encoded document plus the hints the invocation boundary needs to deliver it."""
    body: str
    filename: str
    content_type: str
