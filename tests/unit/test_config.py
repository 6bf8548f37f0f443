"""Unit tests for stemimg configuration management.

This module tests configuration file discovery, loading of the supported
formats, key filtering and priority handling.
"""

import argparse
import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from stemimg.config import (
    _load_pyproject_section,
    discover_config_file,
    find_config_in_parents,
    load_config_file,
    load_config_with_priority,
    merge_configs,
)


@pytest.mark.unit
@pytest.mark.cli
class TestConfigDiscovery:
    """Test configuration file discovery."""

    def test_discover_config_in_cwd(self, tmp_path):
        """Test discovering a config file in the current directory."""
        config_file = tmp_path / ".stemimg.toml"
        config_file.write_text('format = "svg"\n')

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            discovered = discover_config_file()

        assert discovered is not None
        assert discovered.resolve() == config_file.resolve()

    def test_discover_config_in_home(self, tmp_path):
        """Test falling back to the home directory."""
        cwd = tmp_path / "work"
        cwd.mkdir()
        home = tmp_path / "home"
        home.mkdir()
        config_file = home / ".stemimg.json"
        config_file.write_text('{"format": "svg"}')

        with patch("pathlib.Path.cwd", return_value=cwd), patch("pathlib.Path.home", return_value=home):
            discovered = discover_config_file()

        assert discovered == config_file

    def test_toml_preferred_over_json(self, tmp_path):
        """Test that TOML files win when several dedicated files exist."""
        (tmp_path / ".stemimg.toml").write_text('format = "svg"\n')
        (tmp_path / ".stemimg.json").write_text('{"format": "png"}')

        discovered = find_config_in_parents(tmp_path)

        assert discovered.name == ".stemimg.toml"

    def test_found_in_parent_directory(self, tmp_path):
        """Test walking up to a parent directory."""
        config_file = tmp_path / ".stemimg.yaml"
        config_file.write_text("format: svg\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_in_parents(nested).resolve() == config_file.resolve()

    def test_pyproject_needs_section(self, tmp_path):
        """Test that a pyproject.toml without [tool.stemimg] is skipped."""
        project = tmp_path / "project"
        project.mkdir()
        (project / "pyproject.toml").write_text('[project]\nname = "x"\n')
        (tmp_path / "pyproject.toml").write_text('[tool.stemimg]\nppi = 150\n')

        discovered = find_config_in_parents(project)

        assert discovered.resolve() == (tmp_path / "pyproject.toml").resolve()

    def test_dedicated_file_wins_over_pyproject(self, tmp_path):
        """Test that a dedicated file beats pyproject.toml in the same directory."""
        (tmp_path / "pyproject.toml").write_text('[tool.stemimg]\nppi = 150\n')
        (tmp_path / ".stemimg.yml").write_text("ppi: 96\n")

        assert find_config_in_parents(tmp_path).name == ".stemimg.yml"

    def test_broken_pyproject_is_skipped(self, tmp_path):
        """Test that an unparsable pyproject.toml does not stop discovery."""
        (tmp_path / "pyproject.toml").write_text("[tool.stemimg\n")
        nested = tmp_path / "sub"
        nested.mkdir()

        with patch("pathlib.Path.home", return_value=nested):
            assert discover_config_file(nested) is None


@pytest.mark.unit
@pytest.mark.cli
class TestConfigLoading:
    """Test loading configuration files."""

    def test_load_toml(self, tmp_path):
        """Test loading a TOML config."""
        config_file = tmp_path / ".stemimg.toml"
        config_file.write_text('format = "svg"\nppi = 150\n\n[attributes]\nimagesdir = "images"\n')

        config = load_config_file(config_file)

        assert config == {"format": "svg", "ppi": 150, "attributes": {"imagesdir": "images"}}

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML config."""
        config_file = tmp_path / ".stemimg.yaml"
        config_file.write_text(yaml.safe_dump({"inline": True, "imagesoutdir": "build/eq"}))

        assert load_config_file(config_file) == {"inline": True, "imagesoutdir": "build/eq"}

    def test_load_empty_yaml(self, tmp_path):
        """Test that an empty YAML file is an empty config."""
        config_file = tmp_path / ".stemimg.yml"
        config_file.write_text("")

        assert load_config_file(config_file) == {}

    def test_load_json(self, tmp_path):
        """Test loading a JSON config."""
        config_file = tmp_path / ".stemimg.json"
        config_file.write_text(json.dumps({"to_dir": "out", "backend": "pdf"}))

        assert load_config_file(str(config_file)) == {"to_dir": "out", "backend": "pdf"}

    def test_load_pyproject_section(self, tmp_path):
        """Test loading the [tool.stemimg] table."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.stemimg]\nformat = "svg"\n\n[tool.other]\nx = 1\n')

        assert load_config_file(pyproject) == {"format": "svg"}
        assert _load_pyproject_section(pyproject) == {"format": "svg"}

    def test_pyproject_section_must_be_table(self, tmp_path):
        """Test rejecting a non-table section."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool]\nstemimg = "svg"\n')

        with pytest.raises(argparse.ArgumentTypeError, match="must be a table"):
            load_config_file(pyproject)

    def test_unknown_keys_are_dropped_with_warning(self, tmp_path, caplog):
        """Test that unknown keys are reported and ignored."""
        config_file = tmp_path / ".stemimg.json"
        config_file.write_text('{"format": "png", "colour": "red"}')

        with caplog.at_level(logging.WARNING):
            config = load_config_file(config_file)

        assert config == {"format": "png"}
        assert "colour" in caplog.text

    def test_attributes_must_be_mapping(self, tmp_path):
        """Test rejecting a non-mapping attributes value."""
        config_file = tmp_path / ".stemimg.json"
        config_file.write_text('{"attributes": ["imagesdir"]}')

        with pytest.raises(argparse.ArgumentTypeError, match="'attributes'"):
            load_config_file(config_file)

    @pytest.mark.parametrize(
        "filename,content,message",
        [
            (".stemimg.toml", "format = ", "Invalid TOML"),
            (".stemimg.json", "{", "Invalid JSON"),
            (".stemimg.yaml", "format: [", "Invalid YAML"),
            (".stemimg.json", "[1]", "must contain an object"),
            (".stemimg.yaml", "- a\n- b\n", "must contain a mapping"),
            ("settings.ini", "format=svg", "Unsupported config file format"),
        ],
    )
    def test_invalid_files(self, tmp_path, filename, content, message):
        """Test the errors raised for malformed or unsupported files."""
        config_file = tmp_path / filename
        config_file.write_text(content)

        with pytest.raises(argparse.ArgumentTypeError, match=message):
            load_config_file(config_file)

    def test_missing_file(self, tmp_path):
        """Test loading a file that does not exist."""
        with pytest.raises(argparse.ArgumentTypeError, match="does not exist"):
            load_config_file(tmp_path / "missing.toml")

    def test_directory_is_not_a_file(self, tmp_path):
        """Test loading a directory."""
        with pytest.raises(argparse.ArgumentTypeError, match="not a file"):
            load_config_file(tmp_path)


@pytest.mark.unit
@pytest.mark.cli
class TestConfigPriority:
    """Test merging and priority handling."""

    def test_merge_configs_deep_merges_attributes(self):
        """Test that nested tables are merged."""
        base = {"format": "png", "attributes": {"imagesdir": "img", "a": "1"}}
        override = {"format": "svg", "attributes": {"a": "2"}}

        assert merge_configs(base, override) == {"format": "svg", "attributes": {"imagesdir": "img", "a": "2"}}
        assert base["attributes"] == {"imagesdir": "img", "a": "1"}

    def test_explicit_path_wins(self, tmp_path):
        """Test that --config beats the environment variable."""
        explicit = tmp_path / "explicit.json"
        explicit.write_text('{"format": "svg"}')
        env = tmp_path / "env.json"
        env.write_text('{"format": "png"}')

        assert load_config_with_priority(str(explicit), str(env)) == {"format": "svg"}

    def test_env_var_path_beats_discovery(self, tmp_path):
        """Test that the environment path beats discovered files."""
        (tmp_path / ".stemimg.json").write_text('{"ppi": 96}')
        env = tmp_path / "env.json"
        env.write_text('{"ppi": 200}')

        assert load_config_with_priority(None, str(env), start_dir=tmp_path) == {"ppi": 200}

    def test_discovered_config(self, tmp_path):
        """Test falling back to discovery."""
        (tmp_path / ".stemimg.json").write_text('{"ppi": 96}')

        assert load_config_with_priority(start_dir=tmp_path) == {"ppi": 96}

    def test_nothing_found(self, tmp_path):
        """Test that no config yields an empty dict."""
        with patch("pathlib.Path.home", return_value=tmp_path):
            assert load_config_with_priority(start_dir=tmp_path) == {}

    def test_explicit_path_errors_propagate(self, tmp_path):
        """Test that an unloadable explicit path raises."""
        with pytest.raises(argparse.ArgumentTypeError):
            load_config_with_priority(str(tmp_path / "nope.json"))


def test_paths_are_accepted_as_strings(tmp_path):
    """Test that load_config_file accepts plain strings."""
    config_file = Path(tmp_path) / ".stemimg.toml"
    config_file.write_text("inline = false\n")

    assert load_config_file(str(config_file)) == {"inline": False}
