"""
ECU Reporter HTTP API

This FastAPI application exposes the three reporting operations as POST
endpoints:
- /generate-report: JSON or Markdown vulnerability report of a scan
- /export-sbom: CycloneDX, SPDX or SWID document of a scan's components
- /fetch-cve: NVD metadata for a CVE through the shared cache

Every response carries permissive CORS headers, pre-flight requests get an
empty body, and failures are returned as ``{"error": "<message>"}``.

Run with: uvicorn ecu_reporter.server:create_app --factory
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from . import __version__
from .config import Settings
from .exceptions import (
    ReporterError,
    ValidationError,
    ScanNotFoundError,
    CVENotFoundError,
    UpstreamUnavailableError,
)
from .utilities.reporting.cve_resolver import CVEResolver
from .utilities.reporting.report_generator import generate_report
from .utilities.reporting.sbom_exporter import export_sbom

logger = logging.getLogger("ecu-reporter")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

ERROR_STATUS = [
    (ValidationError, 400),
    (ScanNotFoundError, 404),
    (CVENotFoundError, 404),
    (UpstreamUnavailableError, 502),
]


# =============================================================================
# Request Schemas
# =============================================================================

class ReportRequest(BaseModel):
    scanId: Optional[str] = None
    format: Optional[str] = "json"


class SBOMRequest(BaseModel):
    scanId: Optional[str] = None
    format: Optional[str] = None


class CVERequest(BaseModel):
    cveId: Optional[str] = None


def status_for(error: ReporterError) -> int:
    """HTTP status for a reporter error; anything unmapped is a 500."""
    for error_cls, status in ERROR_STATUS:
        if isinstance(error, error_cls):
            return status
    return 500


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


# =============================================================================
# Application Factory
# =============================================================================

def create_app(store=None, nvd=None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        store: Scan store client; built from settings when omitted
        nvd: NVD client; built from settings when omitted
        settings: Runtime configuration; read from the environment when omitted
    """
    settings = settings or Settings.from_env()
    store = store if store is not None else settings.build_store()
    nvd = nvd if nvd is not None else settings.build_nvd_client()
    resolver = CVEResolver(
        store,
        nvd,
        ttl=settings.cve_cache_ttl,
        single_flight=settings.cve_single_flight,
    )

    app = FastAPI(
        title="ECU Reporter API",
        description="Reports, SBOM exports and CVE metadata for ECU firmware scans",
        version=__version__,
    )

    @app.middleware("http")
    async def cors_and_errors(request: Request, call_next):
        """CORS headers go on every response, with or without an Origin header, which CORSMiddleware does not do."""
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error serving {request.url.path}: {e}", exc_info=True)
            response = error_response(str(e) or "Unknown error", 500)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(ReporterError)
    async def reporter_error_handler(request: Request, exc: ReporterError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.url.path} failed: {type(exc).__name__}: {exc.message}")
        else:
            logger.info(f"{request.url.path} rejected ({status_code}): {exc.message}")
        return error_response(exc.message, status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            return error_response("Invalid JSON body", 400)
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request body")
        return error_response(f"{location}: {message}" if location else message, 400)

    # =========================================================================
    # Endpoints
    # =========================================================================

    @app.post("/generate-report")
    def generate_report_endpoint(request: ReportRequest):
        document = generate_report(store, request.scanId, request.format)
        return Response(
            content=document.body,
            media_type=document.content_type,
            headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
        )

    @app.post("/export-sbom")
    def export_sbom_endpoint(request: SBOMRequest):
        document = export_sbom(store, request.scanId, request.format)
        return {
            "data": document.body,
            "filename": document.filename,
            "contentType": document.content_type,
        }

    @app.post("/fetch-cve")
    def fetch_cve_endpoint(request: CVERequest):
        entry = resolver.resolve(request.cveId)
        return entry.to_row()

    logger.debug("HTTP application created")
    return app
