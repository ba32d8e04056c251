"""Tests for compiler configuration."""

import json

import pytest
from pydantic import ValidationError as SettingsError

from declient.config import (
    DEFAULT_ROOT_NAMESPACE,
    DEFAULT_SOURCE_FILE_PATH,
    CompilerConfig,
    load_compiler_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "DECLIENT_ROOT_NAMESPACE",
        "DECLIENT_SOURCE_FILE_PATH",
        "DECLIENT_GENERATE_SEALED_CLASSES",
        "DECLIENT_OUTPUT_SOURCE_FILES",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestCompilerConfig:
    def test_defaults(self):
        config = CompilerConfig()
        assert config.root_namespace == DEFAULT_ROOT_NAMESPACE
        assert config.source_file_path == DEFAULT_SOURCE_FILE_PATH
        assert config.generate_sealed_classes is False
        assert config.output_source_files is False

    def test_empty_values_fall_back(self):
        config = CompilerConfig(root_namespace="  ", source_file_path="")
        assert config.root_namespace == DEFAULT_ROOT_NAMESPACE
        assert config.source_file_path == DEFAULT_SOURCE_FILE_PATH

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("DECLIENT_ROOT_NAMESPACE", "env.clients")
        monkeypatch.setenv("DECLIENT_GENERATE_SEALED_CLASSES", "true")
        config = CompilerConfig()
        assert config.root_namespace == "env.clients"
        assert config.generate_sealed_classes is True

    def test_frozen(self):
        config = CompilerConfig()
        with pytest.raises(SettingsError):
            config.root_namespace = "changed"


class TestLoadCompilerConfig:
    def test_without_file(self):
        assert load_compiler_config() == CompilerConfig()

    def test_toml_table(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text(
            '[declient]\nroot_namespace = "toml.clients"\noutput_source_files = true\n',
            encoding="utf-8",
        )
        config = load_compiler_config(path)
        assert config.root_namespace == "toml.clients"
        assert config.output_source_files is True

    def test_json_top_level(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"generate_sealed_classes": True}), encoding="utf-8")
        assert load_compiler_config(path).generate_sealed_classes is True

    def test_discovers_file_in_working_directory(self, tmp_path):
        (tmp_path / "declient.toml").write_text('source_file_path = "gen"\n', encoding="utf-8")
        assert load_compiler_config().source_file_path == "gen"

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        path = tmp_path / "declient.toml"
        path.write_text('root_namespace = "file.clients"\n', encoding="utf-8")
        config = load_compiler_config(path, root_namespace="cli.clients", source_file_path=None)
        assert config.root_namespace == "cli.clients"
        assert config.source_file_path == DEFAULT_SOURCE_FILE_PATH

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_compiler_config(tmp_path / "absent.toml")
