"""Tests for configuration loading."""

import pytest

from scss_bundler.config import DEFAULT_CONFIG_FILENAME, BundlerConfig
from scss_bundler.errors import ConfigError


class TestLoad:
    def test_defaults_when_missing(self, tmp_path, monkeypatch):
        """No config file gives the defaults."""
        monkeypatch.chdir(tmp_path)
        cfg = BundlerConfig.load()
        assert cfg.source_dir == "./scss"
        assert cfg.shared_file == (tmp_path / "dist" / "common.css").resolve()

    def test_explicit_missing_file(self, tmp_path):
        """A named config file that does not exist is an error."""
        with pytest.raises(ConfigError):
            BundlerConfig.load(tmp_path / "nope.yaml")

    def test_paths_relative_to_config_file(self, tmp_path):
        """Configured paths resolve against the file's directory."""
        conf_dir = tmp_path / "site"
        conf_dir.mkdir()
        path = conf_dir / DEFAULT_CONFIG_FILENAME
        path.write_text("source_dir: styles\nout_dir: public/css\nverbose: true\n", encoding="utf-8")

        cfg = BundlerConfig.load(path)

        assert cfg.source_path == (conf_dir / "styles").resolve()
        assert cfg.out_path == (conf_dir / "public" / "css").resolve()
        assert cfg.verbose

    def test_unknown_option(self, tmp_path):
        """Unknown keys are rejected."""
        path = tmp_path / DEFAULT_CONFIG_FILENAME
        path.write_text("scssDir: x\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            BundlerConfig.load(path)

    def test_not_a_mapping(self, tmp_path):
        """A config file must hold a mapping."""
        path = tmp_path / DEFAULT_CONFIG_FILENAME
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            BundlerConfig.load(path)

    def test_bad_yaml(self, tmp_path):
        """Invalid YAML is a ConfigError."""
        path = tmp_path / DEFAULT_CONFIG_FILENAME
        path.write_text("source_dir: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            BundlerConfig.load(path)

    def test_invalid_output_style(self):
        """Only libsass output styles are accepted."""
        with pytest.raises(ConfigError):
            BundlerConfig(output_style="pretty")


class TestSaveAndOverride:
    def test_save_then_load(self, tmp_path):
        """A saved config loads back unchanged."""
        path = BundlerConfig(out_dir="build", output_style="compressed").save(
            tmp_path / DEFAULT_CONFIG_FILENAME
        )
        cfg = BundlerConfig.load(path)
        assert cfg.out_dir == "build"
        assert cfg.output_style == "compressed"

    def test_override_skips_none(self):
        """Overrides left as None keep the current value."""
        cfg = BundlerConfig(out_dir="build").override(out_dir=None, verbose=True)
        assert cfg.out_dir == "build"
        assert cfg.verbose
