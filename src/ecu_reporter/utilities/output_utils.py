"""
Helpers for delivering rendered documents from the CLI.
"""

import os
import logging
from typing import Optional, Union

from ..exceptions import FileSystemError
from ..models import RenderedDocument

logger = logging.getLogger("ecu-reporter")


def resolve_output_path(document: RenderedDocument, output: Optional[str]) -> str:
    """
    Where a document should be written.

    An explicit ``--output`` wins; an existing directory receives the
    document under its filename hint; otherwise the hint is used in the
    current directory.
    """
    filename = os.path.basename(document.filename)
    if not output:
        return filename
    if os.path.isdir(output):
        return os.path.join(output, filename)
    return output


def save_document(document: RenderedDocument, output: Optional[str] = None) -> str:
    """
    Write a rendered document to disk.

    Returns:
        str: The path the document was written to

    Raises:
        FileSystemError: If the file cannot be written
    """
    filepath = resolve_output_path(document, output)
    output_dir = os.path.dirname(filepath) or "."
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(document.body)
    except OSError as e:
        raise FileSystemError(f"Failed to write {filepath}: {e}", details={"path": filepath}) from e
    logger.debug(f"Wrote {len(document.body)} characters to {filepath}")
    return filepath


def format_duration(duration_seconds: Optional[Union[int, float]]) -> str:
    """Human-readable elapsed time, e.g. '2 minutes, 5 seconds'."""
    if duration_seconds is None:
        return "N/A"
    try:
        total = int(round(float(duration_seconds)))
    except (ValueError, TypeError):
        return "Invalid Duration"

    minutes, seconds = divmod(total, 60)
    parts = []
    if minutes:
        parts.append(f"{minutes} minutes")
    if seconds or not minutes:
        parts.append("1 second" if seconds == 1 else f"{seconds} seconds")
    return ", ".join(parts)
