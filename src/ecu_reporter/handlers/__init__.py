# ecu_reporter/handlers/__init__.py

import logging

# Common logger for all handlers
logger = logging.getLogger("ecu-reporter")

# Import handlers
from .generate_report import handle_generate_report
from .export_sbom import handle_export_sbom
from .fetch_cve import handle_fetch_cve
from .serve import handle_serve

__all__ = [
    'handle_generate_report',
    'handle_export_sbom',
    'handle_fetch_cve',
    'handle_serve',
]
