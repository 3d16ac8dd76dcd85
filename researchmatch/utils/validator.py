"""
Dataset Validator Module
Validates and loads the read-only researcher profile dataset.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import jsonlines
import structlog
from jsonschema import Draft7Validator, FormatChecker, ValidationError
from pydantic import ValidationError as ModelValidationError
from rich.console import Console

from researchmatch.models.profile import Profile

console = Console()
logger = structlog.get_logger(__name__)

DEFAULT_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"
PROFILE_DATASET_SCHEMA = "profile_dataset_schema.json"


class DatasetError(Exception):
    """Raised when the profile dataset cannot be loaded or fails validation."""

    pass


class DatasetValidator:
    """Validates profile datasets against JSON schemas."""

    def __init__(self, schema_dir: Path = DEFAULT_SCHEMA_DIR):
        """
        Initialize validator with schema directory.

        Args:
            schema_dir: Path to directory containing JSON schemas
        """
        self.schema_dir = Path(schema_dir)
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Load JSON schema from file.

        Args:
            schema_name: Schema filename (e.g., "profile_dataset_schema.json")

        Returns:
            Loaded schema dictionary

        Raises:
            DatasetError: If schema file not found or invalid
        """
        if schema_name in self._schemas:
            logger.debug("schema_loaded_from_cache", schema_name=schema_name)
            return self._schemas[schema_name]

        schema_path = self.schema_dir / schema_name
        if not schema_path.exists():
            logger.error(
                "schema_not_found",
                schema_name=schema_name,
                schema_path=str(schema_path),
            )
            raise DatasetError(f"Schema file not found: {schema_path}")

        try:
            with open(schema_path, "r", encoding="utf-8") as f:
                schema = json.load(f)
            self._schemas[schema_name] = schema
            logger.debug("schema_loaded", schema_name=schema_name)
            return schema
        except json.JSONDecodeError as e:
            logger.error("schema_invalid_json", schema_name=schema_name, error=str(e))
            raise DatasetError(f"Invalid JSON in schema {schema_name}: {e}")

    def validate(
        self, data: Any, schema_name: str = PROFILE_DATASET_SCHEMA
    ) -> None:
        """
        Validate data against schema.

        Raises:
            DatasetError: If validation fails with detailed error messages
        """
        schema = self.load_schema(schema_name)
        validator = Draft7Validator(schema, format_checker=FormatChecker())

        errors = list(validator.iter_errors(data))
        if not errors:
            logger.debug("validation_passed", schema_name=schema_name)
            return

        logger.warning(
            "validation_failed", schema_name=schema_name, error_count=len(errors)
        )
        error_messages = self._format_validation_errors(errors, schema_name)
        raise DatasetError("\n".join(error_messages))

    def validate_file(
        self, dataset_path: Path, schema_name: str = PROFILE_DATASET_SCHEMA
    ) -> List[Dict[str, Any]]:
        """
        Read and validate a dataset file (JSON array or JSON Lines).

        Args:
            dataset_path: Path to .json or .jsonl dataset
            schema_name: Schema filename to validate against

        Returns:
            Validated list of raw profile records

        Raises:
            DatasetError: If file not found, unreadable, or invalid
        """
        dataset_path = Path(dataset_path)
        if not dataset_path.exists():
            logger.error("dataset_not_found", dataset_path=str(dataset_path))
            raise DatasetError(f"Profile dataset not found: {dataset_path}")

        try:
            if dataset_path.suffix == ".jsonl":
                with jsonlines.open(dataset_path) as reader:
                    records = list(reader)
            else:
                with open(dataset_path, "r", encoding="utf-8") as f:
                    records = json.load(f)
        except (json.JSONDecodeError, jsonlines.InvalidLineError) as e:
            logger.error(
                "dataset_invalid_json", dataset_path=str(dataset_path), error=str(e)
            )
            raise DatasetError(
                f"Invalid JSON in {dataset_path.name}: {e}\n"
                f"Check for trailing commas, missing quotes, or invalid syntax."
            )

        self.validate(records, schema_name)
        self._check_unique_ids(records)
        return records

    def load_profiles(self, dataset_path: Path) -> List[Profile]:
        """
        Load the profile dataset into immutable Profile models.

        Raises:
            DatasetError: If the dataset is missing or invalid
        """
        console.print(f"  Loading researcher profiles from {dataset_path}...")
        records = self.validate_file(Path(dataset_path))

        try:
            profiles = [Profile.model_validate(record) for record in records]
        except ModelValidationError as e:
            logger.error("profile_model_invalid", error=str(e))
            raise DatasetError(f"Invalid profile record: {e}")

        logger.info(
            "profiles_loaded", dataset_path=str(dataset_path), count=len(profiles)
        )
        console.print(f"  [+] {len(profiles)} profiles loaded\n")
        return profiles

    def _check_unique_ids(self, records: List[Dict[str, Any]]) -> None:
        seen: set[int] = set()
        duplicates: list[int] = []
        for record in records:
            if record["id"] in seen:
                duplicates.append(record["id"])
            seen.add(record["id"])
        if duplicates:
            logger.error("duplicate_profile_ids", profile_ids=duplicates)
            raise DatasetError(f"Duplicate profile ids in dataset: {duplicates}")

    def _format_validation_errors(
        self, errors: List[ValidationError], schema_name: str
    ) -> List[str]:
        """
        Format validation errors into user-friendly messages.

        Args:
            errors: List of validation errors from jsonschema
            schema_name: Schema name for context

        Returns:
            List of formatted error messages
        """
        messages = [f"\n[X] Dataset validation failed for {schema_name}:\n"]

        for error in errors:
            path = " -> ".join([str(p) for p in error.absolute_path]) or "(root)"

            if error.validator == "required":
                missing_field = error.message.split("'")[1]
                messages.append(
                    f"  * Missing required field: '{missing_field}' at {path}"
                )
            elif error.validator == "type":
                messages.append(
                    f"  * Type mismatch at '{path}': {error.message}\n"
                    f"    -> Expected type: {error.validator_value}"
                )
            elif error.validator == "enum":
                messages.append(
                    f"  * Invalid value at '{path}': {error.message}\n"
                    f"    -> Allowed values: {error.validator_value}"
                )
            elif error.validator == "minimum":
                messages.append(f"  * Value too small at '{path}': {error.message}")
            else:
                messages.append(f"  * Validation error at '{path}': {error.message}")

        messages.append("\n[!] Fix the dataset and try again.\n")
        return messages
