import io
import json
import sys

import pytest

from buildinfo_report import main as main_module
from buildinfo_report.core.build_info_service import BuildInfoUnavailable


def _run_main(monkeypatch, tmp_path, stamp=None):
    monkeypatch.setenv('BUILD_INFO_CONFIG', str(tmp_path / "no-config.yaml"))
    path = tmp_path / "build-info.json"
    if stamp is not None:
        path.write_text(json.dumps(stamp))
    monkeypatch.setenv('BUILD_INFO_PATH', str(path))
    main_module.main()


def test_main_prints_report(monkeypatch, tmp_path, capsys):
    _run_main(monkeypatch, tmp_path, {
        "main": {"version": "v1.2.3"},
        "settings": [
            {"key": "build.time", "value": "2024-03-01T10:05:00Z"},
            {"key": "vcs.revision", "value": "abc123"},
            {"key": "vcs.modified", "value": "true"},
        ],
    })

    captured = capsys.readouterr()
    assert captured.out == 'v1.2.3\nvcs.revision = "abc123"\nvcs.modified = "true"\n'


def test_main_is_idempotent(monkeypatch, tmp_path, capsys):
    stamp = {"git_version": "1.0.0", "git_sha": "deadbeef", "git_ref": "release"}

    _run_main(monkeypatch, tmp_path, stamp)
    first = capsys.readouterr().out
    _run_main(monkeypatch, tmp_path, stamp)
    second = capsys.readouterr().out

    assert first == second
    assert first == '1.0.0\nvcs = "git"\nvcs.revision = "deadbeef"\nvcs.ref = "release"\n'


def test_main_exits_when_build_info_missing(monkeypatch, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        _run_main(monkeypatch, tmp_path)

    assert exc_info.value.code == main_module.EXIT_BUILD_INFO_UNAVAILABLE
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "failed to read build info" in captured.err


def test_main_with_empty_config_section(monkeypatch, tmp_path, capsys):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("build_info:\n  # distribution: clock\n")
    stamp_path = tmp_path / "build-info.json"
    stamp_path.write_text(json.dumps({"git_version": "1.0.0", "git_sha": "abc123"}))
    monkeypatch.setenv('BUILD_INFO_CONFIG', str(config_path))
    monkeypatch.setenv('BUILD_INFO_PATH', str(stamp_path))

    main_module.main()

    assert capsys.readouterr().out == '1.0.0\nvcs = "git"\nvcs.revision = "abc123"\n'


def test_main_empty_config_section_without_env(monkeypatch, tmp_path, capsys):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("build_info:\n")
    monkeypatch.setenv('BUILD_INFO_CONFIG', str(config_path))
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

    # Keep the default stamp path from being read
    monkeypatch.setattr(main_module, "default_source", lambda cfg: _FailingSource())
    with pytest.raises(SystemExit) as exc_info:
        main_module.main()

    assert exc_info.value.code == main_module.EXIT_BUILD_INFO_UNAVAILABLE
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Build stamp: /data/build-info.json" in captured.err


class _FailingSource:
    def read(self):
        raise BuildInfoUnavailable()


def test_debug_logging_keeps_stdout_exact(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
    _run_main(monkeypatch, tmp_path, {"main": {"version": "v2.0.0"}, "settings": [
        {"key": "vcs.revision", "value": "abc123"},
    ]})

    captured = capsys.readouterr()
    assert captured.out == 'v2.0.0\nvcs.revision = "abc123"\n'
    assert "Loaded build stamp" in captured.err
    assert "[DEBUG]" in captured.err


def test_chain_debug_lines_go_to_stderr(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
    with pytest.raises(SystemExit):
        _run_main(monkeypatch, tmp_path)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "FileBuildInfoSource: build stamp not found" in captured.err


def test_main_writes_utf8_on_non_utf8_stdout(monkeypatch, tmp_path):
    raw = io.BytesIO()
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(raw, encoding="ascii"))

    _run_main(monkeypatch, tmp_path, {"main": {"version": "v1"}, "settings": [
        {"key": "vcs.ref", "value": "café"},
    ]})

    assert raw.getvalue().decode("utf-8") == 'v1\nvcs.ref = "café"\n'
