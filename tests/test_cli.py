"""
Tests for the command line entry point.
"""

import json

import pandas as pd
import pytest

from stepcounter.cli import build_parser, main


def write_walk(path, walk_samples):
    samples = walk_samples()
    pd.DataFrame({
        "x": [s.x for s in samples],
        "y": [s.y for s in samples],
        "z": [s.z for s in samples],
    }).to_csv(path, index=False)


def test_replay_prints_summary(tmp_path, walk_samples, capsys):
    path = tmp_path / "walk.csv"
    write_walk(path, walk_samples)

    exit_code = main(["replay", str(path), "--prime-gravity", "--sample-period-ms", "120"])

    assert exit_code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["step_detection"]["step_times_ms"] == [2160, 3600, 5040, 6480, 7920]


def test_replay_compare(tmp_path, walk_samples, capsys):
    path = tmp_path / "walk.csv"
    write_walk(path, walk_samples)

    assert main(["replay", str(path), "--compare", "--prime-gravity", "--sample-period-ms", "120"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert "hysteresis" in result["algorithms"]


def test_replay_missing_file(tmp_path):
    assert main(["replay", str(tmp_path / "absent.csv")]) == 1


def test_parser_rejects_unknown_algorithm():
    parser = build_parser()
    with pytest.raises(SystemExit) as exc:
        parser.parse_args(["replay", "walk.csv", "--algorithm", "zero_crossing"])
    assert exc.value.code == 2
