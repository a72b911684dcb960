"""Tests for pt_core.config and pt_core.paths — YAML config loading and locations."""

from unittest.mock import patch

import pytest

from pt_core.config import Config, ConfigError, load_config
from pt_core.paths import config_file, configure_logger, debug_enabled, pt_home


class TestPaths:
    def test_xdg_config_home(self, isolated_config_home):
        assert pt_home() == isolated_config_home / "pt"
        assert config_file() == isolated_config_home / "pt" / "config.yml"

    def test_home_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_CONFIG_HOME")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert pt_home() == tmp_path / ".config" / "pt"

    def test_debug_marker(self, isolated_config_home):
        assert debug_enabled() is False
        (isolated_config_home / "pt").mkdir()
        (isolated_config_home / "pt" / "debug-enabled").touch()
        assert debug_enabled() is True

    def test_configure_logger_writes_command_log(self, isolated_config_home):
        logger = configure_logger("pt.test-config-logger")
        try:
            logger.info("hello log")
            for h in logger.handlers:
                h.flush()
            log = isolated_config_home / "pt" / "debug" / "pt.log"
            assert "hello log" in log.read_text()
            assert logger.propagate is False
            # Second call does not stack handlers
            assert configure_logger("pt.test-config-logger") is logger
            assert len(logger.handlers) == 1
        finally:
            for h in list(logger.handlers):
                h.close()
                logger.removeHandler(h)


class TestLoadConfig:
    def _write(self, home, text):
        d = home / "pt"
        d.mkdir(exist_ok=True)
        (d / "config.yml").write_text(text)

    def test_missing_file_defaults(self):
        assert load_config() == Config()

    def test_empty_file_defaults(self, isolated_config_home):
        self._write(isolated_config_home, "")
        assert load_config() == Config()

    def test_values(self, isolated_config_home):
        self._write(isolated_config_home, 'ignoreAssignees:\n  - "bot$"\n  - "^acme/all"\nbranchPrefix: alice/\n')
        config = load_config()
        assert config.ignore_assignees == ["bot$", "^acme/all"]
        assert config.branch_prefix == "alice"
        assert [p.pattern for p in config.ignore_patterns()] == ["bot$", "^acme/all"]

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "other.yml"
        path.write_text("branchPrefix: ''\n")
        assert load_config(path).branch_prefix == ""

    def test_unknown_key_warns(self, isolated_config_home):
        self._write(isolated_config_home, "ignoreAssignes: []\n")
        with patch("pt_core.config._log") as mock_log:
            assert load_config() == Config()
        mock_log.warning.assert_called_once()
        assert "ignoreAssignes" in mock_log.warning.call_args[0]

    @pytest.mark.parametrize("text,match", [
        ("ignoreAssignees: bot\n", "must be a list"),
        ("ignoreAssignees: [1]\n", "must be strings"),
        ("ignoreAssignees: ['(']\n", "invalid ignoreAssignees regex"),
        ("branchPrefix: [a]\n", "branchPrefix must be a string"),
        ("- just\n- a list\n", "mapping"),
        ("ignoreAssignees: [\n", "Cannot read"),
    ])
    def test_invalid(self, isolated_config_home, text, match):
        self._write(isolated_config_home, text)
        with pytest.raises(ConfigError, match=match):
            load_config()
