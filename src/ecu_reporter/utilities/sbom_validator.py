# ecu_reporter/utilities/sbom_validator.py

import json
import logging
import xml.etree.ElementTree as ET
from typing import List

from ..exceptions import ValidationError

logger = logging.getLogger("ecu-reporter")

MAX_REPORTED_ISSUES = 5


class SBOMValidator:
    """
    Checks generated SBOM documents against their format's tooling.

    CycloneDX is checked against the official 1.5 JSON schema, SPDX is parsed
    and validated with spdx-tools, and SWID is checked for well-formedness.
    Validation is advisory: every method returns the list of issues found and
    an empty list means the document passed.
    """

    @staticmethod
    def validate(sbom_format: str, content: str) -> List[str]:
        validators = {
            "cyclonedx": SBOMValidator._validate_cyclonedx,
            "spdx": SBOMValidator._validate_spdx,
            "swid": SBOMValidator._validate_swid,
        }
        validator = validators.get(sbom_format)
        if validator is None:
            raise ValidationError(f"Unknown SBOM format: {sbom_format}")
        logger.debug(f"Validating generated {sbom_format} document")
        return validator(content)

    @staticmethod
    def _validate_cyclonedx(content: str) -> List[str]:
        try:
            from cyclonedx.validation.json import JsonStrictValidator
            from cyclonedx.schema import SchemaVersion
        except ImportError as e:
            raise ValidationError("CycloneDX library not available. Please install cyclonedx-python-lib.") from e

        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            return [f"Invalid JSON format: {e}"]

        validation_error = JsonStrictValidator(SchemaVersion.V1_5).validate_str(content)
        if validation_error is None:
            logger.debug("CycloneDX document passed schema validation")
            return []
        return [f"CycloneDX validation failed: {validation_error}"]

    @staticmethod
    def _validate_spdx(content: str) -> List[str]:
        try:
            from spdx_tools.spdx.parser.jsonlikedict.json_like_dict_parser import JsonLikeDictParser
            from spdx_tools.spdx.parser.error import SPDXParsingError
            from spdx_tools.spdx.validation.document_validator import validate_full_spdx_document
        except ImportError as e:
            raise ValidationError("SPDX tools library not available. Please install spdx-tools.") from e

        try:
            document = JsonLikeDictParser().parse(json.loads(content))
        except json.JSONDecodeError as e:
            return [f"Invalid JSON format: {e}"]
        except SPDXParsingError as e:
            return [f"SPDX parsing failed: {'; '.join(e.get_messages()[:MAX_REPORTED_ISSUES])}"]

        validation_messages = validate_full_spdx_document(document)
        if not validation_messages:
            logger.debug("SPDX document passed validation")
        return [msg.validation_message for msg in validation_messages[:MAX_REPORTED_ISSUES]]

    @staticmethod
    def _validate_swid(content: str) -> List[str]:
        try:
            ET.fromstring(content.encode("utf-8"))
        except ET.ParseError as e:
            return [f"SWID tag is not well-formed XML: {e}"]
        return []
