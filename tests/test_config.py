"""
Tests for configuration loading and validation.
"""

import logging

import pytest
import yaml

from ledger_bank_recon.config import (
    STRATEGY_NAMES,
    ReconConfig,
    _deep_merge,
    generate_default_config,
    load_config,
    validate_config,
)
from ledger_bank_recon.matching.strategies import STRATEGIES
from ledger_bank_recon.utils.exceptions import ConfigurationError
from ledger_bank_recon.utils.logging_config import parse_log_level, setup_logging


class TestLoadConfig:
    """YAML loading merged over defaults."""

    def test_defaults(self):
        config = load_config(None)

        assert config.matching.amount_match_epsilon == 0.50
        assert config.matching.discrepancy_min == 0.01
        assert config.matching.discrepancy_max == 5.0
        assert config.matching.strategy == "first_fit"
        assert config.matching.index_by_date is False
        assert config.config_file_path is None

    def test_user_file_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "matching": {"amount_match_epsilon": 1.0, "strategy": "best_fit"},
                    "input": {"statements": {"date_format": "%d/%m/%Y"}},
                }
            )
        )

        config = load_config(path)

        assert config.matching.amount_match_epsilon == 1.0
        assert config.matching.strategy == "best_fit"
        # Untouched keys keep their defaults
        assert config.matching.discrepancy_max == 5.0
        assert config.input.statements["date_format"] == "%d/%m/%Y"
        assert config.input.statements["column_mappings"]["id"] == "unique_identifier"
        assert config.config_file_path == str(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).matching.strategy == "first_fit"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("matching: [unclosed")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("matching:\n  amount_match_epsilon: lots\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)

    def test_generated_file_round_trips(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        generate_default_config(path)

        assert path.read_text().startswith("# Ledger to Bank Statement")
        assert load_config(path).matching.amount_match_epsilon == 0.50


class TestValidateConfig:
    """Cross-field constraints."""

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("amount_match_epsilon", 0.0, "positive"),
            ("discrepancy_min", -1.0, "negative"),
            ("discrepancy_min", 5.0, "lower than"),
            ("strategy", "optimal", "Unknown matching strategy"),
        ],
    )
    def test_rejects(self, field, value, message):
        config = ReconConfig()
        setattr(config.matching, field, value)
        with pytest.raises(ConfigurationError, match=message):
            validate_config(config)

    def test_rejects_zero_workers(self):
        config = ReconConfig()
        config.loading.max_workers = 0
        with pytest.raises(ConfigurationError, match="max_workers"):
            validate_config(config)

    def test_strategy_names_match_registry(self):
        assert STRATEGY_NAMES == tuple(STRATEGIES)

    def test_band_independent_of_epsilon(self):
        config = ReconConfig()
        config.matching.amount_match_epsilon = 0.10
        config.matching.discrepancy_max = 0.05
        validate_config(config)


class TestDeepMerge:
    def test_nested_merge(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        merged = _deep_merge(base, {"a": {"c": 20}, "e": 5})

        assert merged == {"a": {"b": 1, "c": 20}, "d": 3, "e": 5}
        assert base["a"]["c"] == 2


class TestLogging:
    def test_parse_log_level(self):
        assert parse_log_level("debug") == logging.DEBUG
        assert parse_log_level("WARNING") == logging.WARNING
        assert parse_log_level("chatty") == logging.INFO

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "recon.log"
        logger = setup_logging(logging.DEBUG, log_file=log_file)

        assert logger.name == "ledger_bank_recon"
        assert len(logger.handlers) == 2
        logging.getLogger("ledger_bank_recon.tests").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
