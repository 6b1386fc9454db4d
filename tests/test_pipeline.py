from __future__ import annotations

from pathlib import Path

import pytest

from conftest import HEADERS, make_row
from frame_latency.pipeline import analyze_file, analyze_table
from frame_latency.profiles import FILTERED, LEGACY
from frame_latency.sample import SampleSpec, generate_rows, write_sample_log


def test_sample_log_filtered_report() -> None:
    headers, rows = generate_rows(SampleSpec(frames=120, upload=True, drop_ratio=0.05, seed=1))
    report = analyze_table(headers, rows, FILTERED)

    titles = [r.title for r in report.rows]
    assert titles[:3] == ["Timestamp difference", "Frame interval", "Capture time"]
    assert "Upload time" in titles
    assert titles[-1] == "Total time"

    assert report.row("Frame interval").values[0] == pytest.approx(1.0 / 30.0, abs=1e-3)
    assert report.row("Capture time").values[0] == pytest.approx(0.004, abs=1e-3)
    # 每帧均值都是正值，极差非负。
    assert all(v >= 0.0 for v in report.row("Timestamp difference").values)


def test_sample_log_file_legacy_report(tmp_path: Path) -> None:
    path = tmp_path / "sample.csv"
    n = write_sample_log(path, SampleSpec(frames=50, seed=2))
    assert n == 50

    report = analyze_file(path, LEGACY)
    assert report.profile == "legacy"
    assert "Upload time" not in [r.title for r in report.rows]
    assert report.reducers[-1].label == "percentile95.3"


def test_group_ceiling_changes_timestamp_spread() -> None:
    headers, rows = generate_rows(SampleSpec(frames=30, timestamps=3, seed=3))
    full = analyze_table(headers, rows, LEGACY)
    single = analyze_table(headers, rows, LEGACY, ceilings={"timestamps": 0})

    # 只保留 timestamp0 时组内极差恒为 0。
    assert single.row("Timestamp difference").values[3] == 0.0
    assert full.row("Timestamp difference").values[3] > 0.0


def test_slow_frame_rate_keeps_frame_interval() -> None:
    # 1 fps：帧间隔 1.0s 超过 0.75s 的毛刺阈值，但帧间隔行不做毛刺过滤。
    rows = [make_row(float(i), num=i) for i in range(5)]
    report = analyze_table(HEADERS, rows, FILTERED)

    interval = report.row("Frame interval")
    assert interval.values[0] == pytest.approx(1.0)
    assert interval.values[2] == pytest.approx(1.0)
    assert report.row("Total time").values[0] == pytest.approx(1.5)
