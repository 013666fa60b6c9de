"""Unit tests for index configuration and config loading."""

import json
import os

import pytest
from pydantic import ValidationError

from gnosis.core.config import DEFAULT_DEBOUNCE_SECONDS, Config, IndexSection
from gnosis.core.exceptions import ConfigError


class TestIndexSection:
    """Test IndexSection validation and normalization."""

    def test_defaults(self):
        section = IndexSection(index_path="/tmp/idx")

        assert section.watch_extension == ".md"
        assert section.index_type == "en"
        assert section.index_name == "wiki"
        assert section.restricted == frozenset()
        assert section.debounce_seconds == DEFAULT_DEBOUNCE_SECONDS == 10.0
        assert section.max_latency_seconds is None
        assert section.flush_on_close is True
        assert section.cleanup_orphans is True

    def test_original_key_names(self):
        section = IndexSection.model_validate(
            {
                "WatchDirs": {"/srv/wiki/": "/wiki/"},
                "WatchExtension": ".txt",
                "IndexPath": "/srv/index",
                "IndexType": "de",
                "IndexName": "notes",
                "Restricted": ["private"],
            }
        )

        assert section.watch_dirs == {"/srv/wiki": "/wiki"}
        assert section.watch_extension == ".txt"
        assert section.index_path == "/srv/index"
        assert section.index_type == "de"
        assert section.index_name == "notes"
        assert section.restricted == frozenset({"private"})

    def test_separator_only_values_become_root(self):
        section = IndexSection(watch_dirs={os.sep: "", "/a//": "/"}, index_path="/i")
        assert section.watch_dirs == {os.sep: "/", "/a": "/"}

    def test_restricted_accepts_comma_string(self):
        section = IndexSection(index_path="/i", restricted="private, secret")
        assert section.restricted == frozenset({"private", "secret"})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"index_path": "  "},
            {"watch_extension": ""},
            {"index_name": " "},
            {"debounce_seconds": 0},
            {"max_latency_seconds": -1},
        ],
    )
    def test_invalid_values(self, overrides):
        values = {"index_path": "/i"} | overrides
        with pytest.raises(ValidationError):
            IndexSection(**values)

    def test_frozen(self):
        section = IndexSection(index_path="/i")
        with pytest.raises(ValidationError):
            section.index_name = "other"

    def test_uri_prefix(self):
        section = IndexSection(watch_dirs={"/srv/wiki": "/wiki"}, index_path="/i")
        assert section.uri_prefix(section.roots[0]) == "/wiki"


class TestConfigLoading:
    """Test Config.load precedence and failures."""

    def _write(self, tmp_path, data) -> str:
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(data), encoding="utf-8")
        return str(config_file)

    def test_load_original_layout(self, tmp_path, clean_environment):
        config_file = self._write(
            tmp_path,
            {
                "Indexes": [{"WatchDirs": {"/a": "/a"}, "IndexPath": "/ia", "IndexName": "a"}],
                "Handlers": {"ignored": True},
            },
        )

        config = Config.load(config_file)

        assert [s.index_name for s in config.indexes] == ["a"]
        assert config.get_index("a").index_path == "/ia"

    def test_environment_and_overrides(self, tmp_path, clean_environment):
        config_file = self._write(tmp_path, {"Indexes": [{"IndexPath": "/ia"}]})
        os.environ["GNOSIS_DEBUG"] = "true"
        os.environ["GNOSIS_INDEXING__DEBOUNCE_SECONDS"] = "2.5"
        os.environ["GNOSIS_INDEXING__FULLTEXT"] = "false"

        config = Config.load(config_file, overrides={"debug": False})

        assert config.debug is False
        assert config.indexes[0].debounce_seconds == 2.5
        assert config.indexes[0].fulltext is False

    def test_bad_environment_value(self, tmp_path, clean_environment):
        config_file = self._write(tmp_path, {"Indexes": [{"IndexPath": "/ia"}]})
        os.environ["GNOSIS_INDEXING__DEBOUNCE_SECONDS"] = "soon"

        with pytest.raises(ConfigError):
            Config.load(config_file)

    def test_missing_file(self, tmp_path, clean_environment):
        with pytest.raises(ConfigError):
            Config.load(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path, clean_environment):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError):
            Config.load(config_file)

    def test_invalid_section(self, tmp_path, clean_environment):
        config_file = self._write(tmp_path, {"Indexes": [{"IndexName": "no path"}]})

        with pytest.raises(ConfigError):
            Config.load(config_file)

    def test_unknown_index_name(self):
        with pytest.raises(KeyError):
            Config().get_index("missing")
