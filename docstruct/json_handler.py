"""
JSON output handler with schema validation.

This module turns a DocumentStructure (and optionally its summary) into the
JSON output record, validates it against the bundled JSON schemas and writes it
to disk with multilingual text preserved.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import ValidationError, validate

from .data_models import DocumentStructure, SummaryResult
from .logging_config import JSONOutputError, setup_logging

logger = setup_logging()

SCHEMA_DIR = Path(__file__).parent / "schema"


class JSONHandler:
    """
    Handles JSON output formatting and schema validation for document structures.

    Features:
    - Schema validation of the structure record and of the summary block
    - Special character and multilingual content preservation
    - Deterministic serialization (same structure, same bytes)
    """

    def __init__(self, schema_path: Optional[str] = None, summary_schema_path: Optional[str] = None):
        """
        Initialize the JSON handler.

        Args:
            schema_path: Path to the structure schema; bundled schema when omitted
            summary_schema_path: Path to the summary schema; bundled schema when omitted
        """
        self.schema_path = schema_path or str(SCHEMA_DIR / "document_structure_schema.json")
        self.summary_schema_path = summary_schema_path or str(SCHEMA_DIR / "summary_schema.json")
        self.schema = self._load_schema(self.schema_path)
        self.summary_schema = self._load_schema(self.summary_schema_path)

    def _load_schema(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Load a JSON schema for validation.

        Returns:
            Loaded schema dictionary or None if loading fails
        """
        schema_file = Path(path)
        if not schema_file.exists():
            logger.warning(f"Schema file not found: {path}")
            return None

        try:
            with open(schema_file, 'r', encoding='utf-8') as f:
                schema = json.load(f)
            logger.debug(f"Loaded schema from {path}")
            return schema
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load schema from {path}: {e}")
            return None

    def format_output(self, structure: DocumentStructure,
                      summary: Optional[SummaryResult] = None) -> Dict[str, Any]:
        """
        Format a document structure into the output record.

        Args:
            structure: Processed document
            summary: Optional summary; adds ``summary`` and ``usedRemoteSummary`` keys

        Returns:
            JSON-serializable dictionary
        """
        output = structure.to_json_dict()
        if summary is not None:
            output["summary"] = summary.summary.to_json_dict()
            output["usedRemoteSummary"] = summary.is_remote
        return output

    def validate_schema(self, json_data: Dict[str, Any]) -> bool:
        """
        Validate an output record against the loaded schemas.

        Args:
            json_data: Dictionary to validate

        Returns:
            True if validation passes (or no schema is loaded), False otherwise
        """
        if not self.schema:
            logger.warning("No schema loaded, skipping validation")
            return True

        try:
            validate(instance=json_data, schema=self.schema)
            if "summary" in json_data and self.summary_schema:
                validate(instance=json_data["summary"], schema=self.summary_schema)
            logger.debug("Schema validation passed")
            return True
        except ValidationError as e:
            logger.error(f"Schema validation failed: {e.message}")
            logger.debug(f"Validation error path: {list(e.absolute_path)}")
            return False

    def serialize(self, json_data: Dict[str, Any]) -> str:
        """
        Serialize an output record.

        Raises:
            JSONOutputError: If the data is not JSON-serializable
        """
        try:
            return json.dumps(json_data, ensure_ascii=False, indent=2, sort_keys=False)
        except (TypeError, ValueError) as e:
            raise JSONOutputError(f"Could not serialize output: {e}") from e

    def write_json_file(self, json_data: Dict[str, Any], output_path: str) -> bool:
        """
        Write JSON data to file with UTF-8 encoding.

        Args:
            json_data: Dictionary to write as JSON
            output_path: Path to output file

        Returns:
            True if successful, False otherwise
        """
        try:
            content = self.serialize(json_data)
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(content, encoding='utf-8')

            logger.info(f"Successfully wrote JSON output to {output_path}")
            return True

        except (OSError, JSONOutputError) as e:
            logger.error(f"Failed to write JSON file {output_path}: {e}")
            return False

    def process_and_write(self, structure: DocumentStructure, output_path: str,
                          summary: Optional[SummaryResult] = None, validate: bool = True) -> bool:
        """
        Complete output step: format, validate and write.

        Args:
            structure: Processed document
            output_path: Path to output file
            summary: Optional summary to embed
            validate: Whether to perform schema validation

        Returns:
            True if the file was written
        """
        json_data = self.format_output(structure, summary)

        if validate and not self.validate_schema(json_data):
            logger.warning("Schema validation failed, but continuing with output")

        return self.write_json_file(json_data, output_path)


def create_json_handler(schema_path: Optional[str] = None) -> JSONHandler:
    """
    Factory function to create a JSONHandler instance.

    Args:
        schema_path: Optional path to schema file

    Returns:
        Configured JSONHandler instance
    """
    return JSONHandler(schema_path)
