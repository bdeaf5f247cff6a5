"""
Utilities package for the ECU reporter.

This package contains the reporting pipelines (reports, SBOM export and CVE
resolution), SBOM validation, output helpers and error handling.
"""

from .error_handling import format_and_print_error, handler_error_wrapper
from .output_utils import save_document, format_duration
from .sbom_validator import SBOMValidator

__all__ = [
    # Error handling
    'format_and_print_error',
    'handler_error_wrapper',
    # Output
    'save_document',
    'format_duration',
    # SBOM validation
    'SBOMValidator',
]
