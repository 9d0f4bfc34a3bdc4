"""Load client configuration from YAML files."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from src.fetch.config import ClientConfig
from src.fetch.errors import FetchClientError
from src.observability.logging import get_logger


logger = get_logger(__name__, component="config")


class ConfigValidationError(FetchClientError):
    """Raised when a configuration file fails validation."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def _format_errors(error: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "location": ".".join(str(part) for part in detail["loc"]),
            "message": detail["msg"],
            "type": detail["type"],
        }
        for detail in error.errors()
    ]


def load_client_config(path: Path) -> ClientConfig:
    """Load and validate a client configuration file.

    An empty file yields the default configuration.

    Args:
        path: Path to a YAML file.

    Returns:
        Validated ClientConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed or invalid.
    """
    log = logger.bind(file_path=str(path))

    content = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        errors = [{"location": "", "message": str(e), "type": "yaml_error"}]
        log.error("config_validation_failed", error_count=1)
        raise ConfigValidationError(errors, str(path)) from e

    if not isinstance(data, dict):
        errors = [
            {
                "location": "",
                "message": "Top-level value must be a mapping",
                "type": "type_error",
            }
        ]
        log.error("config_validation_failed", error_count=1)
        raise ConfigValidationError(errors, str(path))

    try:
        config = ClientConfig.model_validate(data)
    except ValidationError as e:
        errors = _format_errors(e)
        log.error("config_validation_failed", error_count=len(errors), errors=errors)
        raise ConfigValidationError(errors, str(path)) from e

    log.info(
        "config_loaded",
        timeout=config.timeout,
        max_redirects=config.max_redirects,
        proxy_enabled=config.proxy.enabled,
        passthrough=config.passthrough,
    )
    return config
