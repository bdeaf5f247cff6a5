# tests/unit/api/test_nvd_api.py

import pytest
import requests

from ecu_reporter.api.nvd_api import NVDAPI, NVD_API_URL
from ecu_reporter.exceptions import ApiError, NetworkError


@pytest.fixture
def nvd(mock_session):
    client = NVDAPI(api_key="nvd-key", timeout=10)
    client.session = mock_session
    return client


def test_fetch_cve_returns_first_record(nvd, mock_session, make_response):
    mock_session.get.return_value = make_response(
        json_data={"vulnerabilities": [{"cve": {"id": "CVE-2021-44228"}}]}
    )
    assert nvd.fetch_cve("CVE-2021-44228") == {"id": "CVE-2021-44228"}

    args, kwargs = mock_session.get.call_args
    assert args == (NVD_API_URL,)
    assert kwargs["params"] == {"cveId": "CVE-2021-44228"}
    assert kwargs["headers"]["apiKey"] == "nvd-key"
    assert kwargs["headers"]["Accept"] == "application/json"
    assert kwargs["timeout"] == 10


def test_fetch_cve_without_key_sends_no_key_header(mock_session, make_response):
    client = NVDAPI()
    client.session = mock_session
    mock_session.get.return_value = make_response(json_data={"vulnerabilities": []})

    assert client.fetch_cve("CVE-2099-0001") is None
    _, kwargs = mock_session.get.call_args
    assert "apiKey" not in kwargs["headers"]


def test_fetch_cve_non_success_status(nvd, mock_session, make_response):
    mock_session.get.return_value = make_response(status_code=503, text="busy")
    with pytest.raises(ApiError, match="status 503") as exc_info:
        nvd.fetch_cve("CVE-2021-44228")
    assert exc_info.value.code == "nvd_error"


def test_fetch_cve_invalid_json(nvd, mock_session, make_response):
    mock_session.get.return_value = make_response(text="<html></html>")
    with pytest.raises(ApiError) as exc_info:
        nvd.fetch_cve("CVE-2021-44228")
    assert exc_info.value.code == "nvd_invalid_json"


def test_fetch_cve_timeout(nvd, mock_session):
    mock_session.get.side_effect = requests.exceptions.Timeout("read timed out")
    with pytest.raises(NetworkError, match="timed out"):
        nvd.fetch_cve("CVE-2021-44228")


def test_fetch_cve_connection_error(nvd, mock_session):
    mock_session.get.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(NetworkError, match="Failed to reach NVD"):
        nvd.fetch_cve("CVE-2021-44228")
