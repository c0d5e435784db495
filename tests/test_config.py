"""Tests for config loading and validation."""

import logging

import pytest

from predict_ledger.config import LedgerConfig, build_config, load_ledger_config, validate_config


class TestLoadConfig:
    def test_defaults(self):
        cfg = load_ledger_config({})
        assert cfg.db_url is None
        assert cfg.sqlite_wal is True
        assert cfg.verbose is False
        assert cfg.outcome_slots == 2
        assert cfg.duplicate_log_level == logging.WARNING

    def test_custom_values(self):
        raw = {
            "ledger": {
                "db_url": "postgresql://ledger@localhost/ledger",
                "sqlite_wal": False,
                "verbose": True,
                "duplicate_resolution_log_level": "debug",
                "outcome_slots": 3,
            }
        }
        cfg = load_ledger_config(raw)
        assert cfg.db_url == "postgresql://ledger@localhost/ledger"
        assert cfg.sqlite_wal is False
        assert cfg.verbose is True
        assert cfg.duplicate_log_level == logging.DEBUG
        assert cfg.outcome_slots == 3

    def test_missing_section_uses_defaults(self):
        assert load_ledger_config({"other_section": {}}) == LedgerConfig()


class TestValidateConfig:
    def test_defaults_pass(self):
        validate_config(LedgerConfig())

    def test_empty_db_url(self):
        with pytest.raises(ValueError, match="db_url"):
            validate_config(LedgerConfig(db_url="  "))

    def test_bad_log_level(self):
        with pytest.raises(ValueError, match="duplicate_resolution_log_level"):
            validate_config(LedgerConfig(duplicate_resolution_log_level="LOUD"))

    def test_all_errors_reported(self):
        with pytest.raises(ValueError) as exc_info:
            validate_config(LedgerConfig(db_url="", outcome_slots=1))
        msg = str(exc_info.value)
        assert "db_url" in msg
        assert "outcome_slots" in msg

    def test_invalid_yaml_section_rejected(self):
        with pytest.raises(ValueError):
            load_ledger_config({"ledger": {"outcome_slots": 1}})


class TestBuildConfig:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        monkeypatch.delenv("LEDGER_DB_URL", raising=False)
        monkeypatch.delenv("LEDGER_VERBOSE", raising=False)
        monkeypatch.setattr("predict_ledger.config.load_dotenv", lambda: None)

    def test_missing_file_gives_defaults(self, tmp_path):
        assert build_config(tmp_path / "absent.yaml") == LedgerConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger:\n  db_url: sqlite:///x.db\n  verbose: true\n")

        cfg = build_config(path)

        assert cfg.db_url == "sqlite:///x.db"
        assert cfg.verbose is True

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger:\n  db_url: sqlite:///x.db\n")
        monkeypatch.setenv("LEDGER_DB_URL", "sqlite:///env.db")
        monkeypatch.setenv("LEDGER_VERBOSE", "yes")

        cfg = build_config(path)

        assert cfg.db_url == "sqlite:///env.db"
        assert cfg.verbose is True

    def test_env_verbose_off(self, tmp_path, monkeypatch):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger:\n  verbose: true\n")
        monkeypatch.setenv("LEDGER_VERBOSE", "0")

        assert build_config(path).verbose is False
