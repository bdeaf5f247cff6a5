# tests/unit/cli/test_argument_parsing.py

import json
from unittest.mock import patch

import pytest

from ecu_reporter.cli import parse_cmdline_args
from ecu_reporter.exceptions import ValidationError, ConfigurationError

ENV_VARS = (
    "ECU_STORE_URL", "ECU_STORE_KEY", "ECU_DATA_FILE", "NVD_API_URL", "NVD_API_KEY",
    "NVD_TIMEOUT", "CVE_CACHE_TTL_HOURS", "CVE_SINGLE_FLIGHT",
)

STORE_ARGS = ["ecu-reporter", "--store-url", "https://store.example", "--store-key", "secret"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "scans.json"
    path.write_text(json.dumps({"scans": []}), encoding="utf-8")
    return str(path)


# --- generate-report ---
def test_generate_report_defaults():
    with patch("sys.argv", STORE_ARGS + ["generate-report", "--scan-id", "abc"]):
        args = parse_cmdline_args()
    assert args.command == "generate-report"
    assert args.scan_id == "abc"
    assert args.format == "json"
    assert args.output is None
    assert args.log == "INFO"


@pytest.mark.parametrize("report_format", ["json", "markdown", "pdf"])
def test_generate_report_formats(report_format):
    argv = STORE_ARGS + ["generate-report", "--scan-id", "abc", "--format", report_format]
    with patch("sys.argv", argv):
        args = parse_cmdline_args()
    assert args.format == report_format


def test_generate_report_rejects_unknown_format():
    argv = STORE_ARGS + ["generate-report", "--scan-id", "abc", "--format", "xml"]
    with patch("sys.argv", argv), pytest.raises(SystemExit):
        parse_cmdline_args()


def test_generate_report_requires_scan_id():
    with patch("sys.argv", STORE_ARGS + ["generate-report"]), pytest.raises(SystemExit):
        parse_cmdline_args()


# --- export-sbom ---
def test_export_sbom_with_validate():
    argv = STORE_ARGS + ["export-sbom", "--scan-id", "abc", "--format", "spdx", "--validate", "--output", "out/"]
    with patch("sys.argv", argv):
        args = parse_cmdline_args()
    assert args.format == "spdx"
    assert args.validate is True
    assert args.output == "out/"


def test_export_sbom_requires_format():
    with patch("sys.argv", STORE_ARGS + ["export-sbom", "--scan-id", "abc"]), pytest.raises(SystemExit):
        parse_cmdline_args()


# --- fetch-cve ---
def test_fetch_cve_overlays_settings(monkeypatch):
    monkeypatch.setenv("NVD_API_KEY", "env-key")
    monkeypatch.setenv("CVE_CACHE_TTL_HOURS", "6")
    argv = STORE_ARGS + ["fetch-cve", "--cve-id", "CVE-2021-44228", "--nvd-api-key", "cli-key", "--nvd-timeout", "5"]
    with patch("sys.argv", argv):
        args = parse_cmdline_args()

    assert args.settings.store_url == "https://store.example"
    assert args.settings.store_key == "secret"
    assert args.settings.nvd_api_key == "cli-key"
    assert args.settings.nvd_timeout == 5.0
    assert args.settings.cve_cache_ttl_hours == 6.0


def test_fetch_cve_keeps_env_key_when_not_given(monkeypatch):
    monkeypatch.setenv("NVD_API_KEY", "env-key")
    with patch("sys.argv", STORE_ARGS + ["fetch-cve", "--cve-id", "CVE-2021-44228"]):
        args = parse_cmdline_args()
    assert args.settings.nvd_api_key == "env-key"


def test_fetch_cve_blank_id():
    with patch("sys.argv", STORE_ARGS + ["fetch-cve", "--cve-id", "  "]):
        with pytest.raises(ValidationError, match="CVE ID required"):
            parse_cmdline_args()


def test_fetch_cve_non_positive_timeout():
    argv = STORE_ARGS + ["fetch-cve", "--cve-id", "CVE-2021-44228", "--nvd-timeout", "0"]
    with patch("sys.argv", argv), pytest.raises(ValidationError):
        parse_cmdline_args()


# --- serve ---
def test_serve_defaults():
    with patch("sys.argv", STORE_ARGS + ["serve"]):
        args = parse_cmdline_args()
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_serve_port_out_of_range():
    with patch("sys.argv", STORE_ARGS + ["serve", "--port", "70000"]), pytest.raises(ValidationError):
        parse_cmdline_args()


# --- store selection ---
def test_store_url_from_env(monkeypatch):
    monkeypatch.setenv("ECU_STORE_URL", "https://env.example")
    monkeypatch.setenv("ECU_STORE_KEY", "env-secret")
    with patch("sys.argv", ["ecu-reporter", "generate-report", "--scan-id", "abc"]):
        args = parse_cmdline_args()
    assert args.store_url == "https://env.example"
    assert args.settings.store_key == "env-secret"


def test_store_url_without_key():
    argv = ["ecu-reporter", "--store-url", "https://store.example", "generate-report", "--scan-id", "abc"]
    with patch("sys.argv", argv), pytest.raises(ValidationError, match="store key"):
        parse_cmdline_args()


def test_no_store_configured():
    with patch("sys.argv", ["ecu-reporter", "generate-report", "--scan-id", "abc"]):
        with pytest.raises(ValidationError):
            parse_cmdline_args()


def test_data_file(data_file):
    with patch("sys.argv", ["ecu-reporter", "--data-file", data_file, "generate-report", "--scan-id", "abc"]):
        args = parse_cmdline_args()
    assert args.settings.data_file == data_file
    assert args.settings.store_url is None


def test_missing_data_file(tmp_path):
    missing = str(tmp_path / "nope.json")
    with patch("sys.argv", ["ecu-reporter", "--data-file", missing, "generate-report", "--scan-id", "abc"]):
        with pytest.raises(ValidationError, match="does not exist"):
            parse_cmdline_args()


def test_bad_environment_value(monkeypatch):
    monkeypatch.setenv("CVE_SINGLE_FLIGHT", "maybe")
    with patch("sys.argv", STORE_ARGS + ["generate-report", "--scan-id", "abc"]):
        with pytest.raises(ConfigurationError):
            parse_cmdline_args()
