"""Unit tests for the gnosis command line."""

import io
import json

import pytest
from rich.console import Console

from gnosis.api.cli.main import create_parser, main
from gnosis.api.cli.utils.rich_output import RichOutputFormatter
from tests.utils.file_watching_helpers import write_page


def _write_config(tmp_path, indexes) -> str:
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"Indexes": indexes}), encoding="utf-8")
    return str(config_file)


def test_parser_commands():
    args = create_parser().parse_args(["watch", "--config", "c.json", "-v", "--index", "wiki"])

    assert args.command == "watch"
    assert args.config == "c.json"
    assert args.verbose is True
    assert args.index == "wiki"


def test_index_command_succeeds(tmp_path, wiki_root, clean_environment, capsys):
    write_page(wiki_root / "a.md")
    config_file = _write_config(
        tmp_path,
        [{"WatchDirs": {str(wiki_root): "/wiki"}, "IndexPath": str(tmp_path / "idx"), "fulltext": False}],
    )

    with pytest.raises(SystemExit) as exc_info:
        main(["index", "--config", config_file])

    assert exc_info.value.code == 0
    assert "Indexing Complete" in capsys.readouterr().out


def test_index_command_reports_failure(tmp_path, wiki_root, clean_environment):
    config_file = _write_config(
        tmp_path,
        [
            {
                "WatchDirs": {str(tmp_path / "missing"): "/wiki"},
                "IndexPath": str(tmp_path / "idx"),
                "fulltext": False,
            }
        ],
    )

    with pytest.raises(SystemExit) as exc_info:
        main(["index", "--config", config_file])

    assert exc_info.value.code == 1


def test_missing_config_exits(tmp_path, clean_environment):
    with pytest.raises(SystemExit) as exc_info:
        main(["index", "--config", str(tmp_path / "nope.json")])

    assert exc_info.value.code == 1


def test_unknown_index_name_exits(tmp_path, wiki_root, clean_environment):
    config_file = _write_config(
        tmp_path, [{"WatchDirs": {str(wiki_root): "/wiki"}, "IndexPath": str(tmp_path / "idx")}]
    )

    with pytest.raises(SystemExit) as exc_info:
        main(["index", "--config", config_file, "--index", "other"])

    assert exc_info.value.code == 1


def test_verbose_info_only_prints_when_verbose():
    quiet_out, loud_out = io.StringIO(), io.StringIO()

    RichOutputFormatter(verbose=False, console=Console(file=quiet_out)).verbose_info("details")
    RichOutputFormatter(verbose=True, console=Console(file=loud_out)).verbose_info("details")

    assert quiet_out.getvalue() == ""
    assert "details" in loud_out.getvalue()


def test_verbose_index_reports_coordinator_totals(tmp_path, wiki_root, clean_environment, capsys):
    write_page(wiki_root / "a.md")
    config_file = _write_config(
        tmp_path,
        [{"WatchDirs": {str(wiki_root): "/wiki"}, "IndexPath": str(tmp_path / "idx"), "fulltext": False}],
    )

    with pytest.raises(SystemExit) as exc_info:
        main(["index", "--config", config_file, "-v"])

    assert exc_info.value.code == 0
    assert "1 updated, 0 skipped, 0 failed" in capsys.readouterr().out
