from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import HEADERS, make_row
from frame_latency.cli import EXIT_FATAL, EXIT_OK, build_arg_parser, main
from frame_latency.logging_utils import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    # 说明：CLI 会给包 logger 挂 stderr handler；测试间清理，避免引用已关闭的捕获流。
    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    if hasattr(logger, "_frame_latency_configured"):
        delattr(logger, "_frame_latency_configured")


def _write_log(path: Path, rows: list[list[str]], headers: list[str] = HEADERS) -> Path:
    lines = [";".join(headers)] + [";".join(r) for r in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_build_arg_parser() -> None:
    args = build_arg_parser().parse_args(["x.csv", "--profile", "legacy", "--glitch-threshold", "0.5"])
    assert args.path == "x.csv"
    assert args.profile == "legacy"
    assert args.glitch_threshold == 0.5
    assert args.config is None


def test_main_prints_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_log(tmp_path / "latency.csv", [make_row(1.0), make_row(1.3)])

    assert main([str(path)]) == EXIT_OK

    out = capsys.readouterr().out.splitlines()
    assert out[0].split()[0] == "mean"
    assert out[-1].startswith("Total time..........:")
    assert "1500.0000" in out[-1]
    # 诊断信息不进入 stdout。
    assert not any("frame_latency" in ln for ln in out)


def test_main_legacy_profile(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rows = [make_row(float(i)) for i in range(3)]
    path = _write_log(tmp_path / "latency.csv", rows)

    assert main([str(path), "--profile", "legacy"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "percentile95" in out
    assert "Frame interval" not in out


def test_main_missing_file_is_fatal(tmp_path: Path) -> None:
    assert main([str(tmp_path / "nope.csv")]) == EXIT_FATAL


def test_main_short_row_is_fatal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_log(tmp_path / "latency.csv", [make_row(1.0), make_row(2.0)[:4]])

    assert main([str(path)]) == EXIT_FATAL
    assert capsys.readouterr().out == ""


def test_main_all_dropped_is_fatal(tmp_path: Path) -> None:
    path = _write_log(tmp_path / "latency.csv", [make_row(float(i), dropped=1) for i in range(3)])
    assert main([str(path)]) == EXIT_FATAL


def test_main_malformed_config_is_fatal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_log(tmp_path / "latency.csv", [make_row(1.0), make_row(1.3)])
    cfg_path = tmp_path / "latency.json"
    cfg_path.write_text("{not json", encoding="utf-8")

    assert main([str(path), "--config", str(cfg_path)]) == EXIT_FATAL
    assert capsys.readouterr().out == ""
