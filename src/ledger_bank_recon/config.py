"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Keys of matching.strategies.STRATEGIES
STRATEGY_NAMES = ("first_fit", "best_fit")


class InputConfig(BaseModel):
    """Configuration for ledger and statement file parsing."""

    ledger: dict[str, Any] = Field(
        default_factory=lambda: {
            "encoding": "utf-8",
            "delimiter": ",",
            "date_format": "%Y-%m-%d %H:%M:%S",
            "column_mappings": {
                "id": "trxID",
                "amount": "amount",
                "kind": "type",
                "date": "transactionTime",
            },
        }
    )
    statements: dict[str, Any] = Field(
        default_factory=lambda: {
            "encoding": "utf-8",
            "delimiter": ",",
            "date_format": "%Y-%m-%d",
            "column_mappings": {
                "id": "unique_identifier",
                "amount": "amount",
                "date": "date",
            },
        }
    )


class MatchingConfig(BaseModel):
    """Configuration for the matching engine."""

    # Pairs qualify when abs(ledger - statement) is strictly below this
    amount_match_epsilon: float = 0.50
    # Matched differences strictly inside (min, max) count as discrepancies
    discrepancy_min: float = 0.01
    discrepancy_max: float = 5.0
    strategy: str = "first_fit"
    index_by_date: bool = False


class LoadingConfig(BaseModel):
    """Configuration for loading statement feeds."""

    max_workers: int = 4


class JsonOutputConfig(BaseModel):
    """Configuration for JSON output."""

    indent: int = 2


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched Transactions"))
    discrepancies: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Discrepancies")
    )
    unmatched_ledger: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Ledger")
    )
    unmatched_statements: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Statements")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    json_report: JsonOutputConfig = Field(default_factory=JsonOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    loading: LoadingConfig = Field(default_factory=LoadingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "ledger": {
                "encoding": "utf-8",
                "delimiter": ",",
                "date_format": "%Y-%m-%d %H:%M:%S",
                "column_mappings": {
                    "id": "trxID",
                    "amount": "amount",
                    "kind": "type",
                    "date": "transactionTime",
                },
            },
            "statements": {
                "encoding": "utf-8",
                "delimiter": ",",
                "date_format": "%Y-%m-%d",
                "column_mappings": {
                    "id": "unique_identifier",
                    "amount": "amount",
                    "date": "date",
                },
            },
        },
        "matching": {
            "amount_match_epsilon": 0.50,
            "discrepancy_min": 0.01,
            "discrepancy_max": 5.0,
            "strategy": "first_fit",
            "index_by_date": False,
        },
        "loading": {
            "max_workers": 4,
        },
        "output": {
            "json_report": {
                "indent": 2,
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched Transactions"},
                "discrepancies": {"enabled": True, "name": "Discrepancies"},
                "unmatched_ledger": {"enabled": True, "name": "Unmatched Ledger"},
                "unmatched_statements": {"enabled": True, "name": "Unmatched Statements"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid values
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping"
            )

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        config = ReconConfig(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    validate_config(config)
    return config


def validate_config(config: ReconConfig) -> None:
    """
    Check cross-field constraints that the models alone do not enforce.

    Args:
        config: Configuration to check

    Raises:
        ConfigurationError: If any constraint is violated
    """
    matching = config.matching

    if matching.amount_match_epsilon <= 0:
        raise ConfigurationError("matching.amount_match_epsilon must be positive")
    if matching.discrepancy_min < 0:
        raise ConfigurationError("matching.discrepancy_min must not be negative")
    if matching.discrepancy_min >= matching.discrepancy_max:
        raise ConfigurationError(
            "matching.discrepancy_min must be lower than matching.discrepancy_max"
        )
    if matching.strategy not in STRATEGY_NAMES:
        raise ConfigurationError(
            f"Unknown matching strategy '{matching.strategy}', "
            f"expected one of: {', '.join(STRATEGY_NAMES)}"
        )
    if config.loading.max_workers < 1:
        raise ConfigurationError("loading.max_workers must be at least 1")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Ledger to Bank Statement Reconciliation Configuration
# Generated configuration file - customize as needed
#
# matching.amount_match_epsilon, matching.discrepancy_min and
# matching.discrepancy_max are independent: with the defaults the upper
# discrepancy bound never applies because no pair further apart than the
# epsilon is matched.

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
