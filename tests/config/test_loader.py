"""Tests for configuration loading."""

from pathlib import Path

import pytest

from canonicalcat.config import load_config, repo_config_path
from canonicalcat.config.loader import _deep_merge, _load_yaml
from canonicalcat.core.errors import ConfigError, ErrorCode


@pytest.fixture
def temp_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo


def _write_repo_config(repo: Path, content: str) -> Path:
    path = repo_config_path(repo)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestLoadYaml:
    def test_given_missing_file_when_loaded_then_empty(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nope.yaml") == {}

    def test_given_empty_file_when_loaded_then_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert _load_yaml(path) == {}

    def test_given_invalid_yaml_when_loaded_then_parse_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("cache: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(path)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_given_list_document_when_loaded_then_parse_error(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(path)


class TestDeepMerge:
    def test_nested_sections_merge(self) -> None:
        base = {"cache": {"cache_dir": "a", "similarity_threshold": 0.5}, "x": 1}
        override = {"cache": {"cache_dir": "b"}}
        assert _deep_merge(base, override) == {
            "cache": {"cache_dir": "b", "similarity_threshold": 0.5},
            "x": 1,
        }

    def test_non_dict_values_replace(self) -> None:
        assert _deep_merge({"scan": {"include": ["a"]}}, {"scan": {"include": ["b"]}}) == {
            "scan": {"include": ["b"]}
        }

    def test_inputs_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    def test_given_no_files_when_loaded_then_defaults(self, temp_repo: Path) -> None:
        config = load_config(temp_repo)
        assert config.cache.similarity_threshold == 0.85
        assert config.cache.cache_dir == ".canonicalcat"
        assert config.scan.include == ["src/**/*.{ts,tsx,js,jsx}"]
        assert config.output.json_enabled is True

    def test_given_repo_yaml_when_loaded_then_overrides_defaults(self, temp_repo: Path) -> None:
        _write_repo_config(temp_repo, "cache:\n  similarity_threshold: 0.5\n")
        config = load_config(temp_repo)
        assert config.cache.similarity_threshold == 0.5
        assert config.cache.cache_dir == ".canonicalcat"

    def test_given_global_and_repo_yaml_when_loaded_then_repo_wins(
        self, temp_repo: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        # Given
        global_path = tmp_path / "global.yaml"
        global_path.write_text("cache:\n  similarity_threshold: 0.3\n  cache_dir: .global-cache\n")
        monkeypatch.setattr("canonicalcat.config.loader.GLOBAL_CONFIG_PATH", global_path)
        _write_repo_config(temp_repo, "cache:\n  similarity_threshold: 0.6\n")

        # When
        config = load_config(temp_repo)

        # Then
        assert config.cache.similarity_threshold == 0.6
        assert config.cache.cache_dir == ".global-cache"

    def test_given_env_var_when_loaded_then_overrides_yaml(
        self, temp_repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_repo_config(temp_repo, "indexer:\n  max_workers: 2\n")
        monkeypatch.setenv("CANONICALCAT__INDEXER__MAX_WORKERS", "8")
        assert load_config(temp_repo).indexer.max_workers == 8

    def test_given_kwargs_when_loaded_then_override_env(
        self, temp_repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CANONICALCAT__LOGGING__LEVEL", "WARNING")
        config = load_config(temp_repo, logging={"level": "DEBUG"})
        assert config.logging.level == "DEBUG"

    def test_given_explicit_path_when_loaded_then_repo_yaml_ignored(
        self, temp_repo: Path, tmp_path: Path
    ) -> None:
        _write_repo_config(temp_repo, "output:\n  output_path: from-repo\n")
        explicit = tmp_path / "custom.yaml"
        explicit.write_text("output:\n  output_path: from-explicit\n")
        config = load_config(temp_repo, config_path=explicit)
        assert config.output.output_path == "from-explicit"

    def test_given_missing_explicit_path_when_loaded_then_file_not_found(
        self, temp_repo: Path
    ) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(temp_repo, config_path=temp_repo / "missing.yaml")
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    @pytest.mark.parametrize("threshold", ["1.5", "-0.1"])
    def test_given_out_of_range_threshold_when_loaded_then_invalid_value(
        self, temp_repo: Path, threshold: str
    ) -> None:
        _write_repo_config(temp_repo, f"cache:\n  similarity_threshold: {threshold}\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(temp_repo)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "similarity_threshold" in exc_info.value.details["field"]

    def test_given_empty_include_when_loaded_then_invalid_value(self, temp_repo: Path) -> None:
        _write_repo_config(temp_repo, "scan:\n  include: []\n")
        with pytest.raises(ConfigError, match="include"):
            load_config(temp_repo)

    def test_given_zero_workers_when_loaded_then_invalid_value(self, temp_repo: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(temp_repo, indexer={"max_workers": 0})
