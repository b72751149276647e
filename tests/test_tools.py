import csv
from pathlib import Path

import pytest

from prometeo.core.decoder import decode
from prometeo.core.models import Reading, TextEvent
from prometeo.dataio.capture_loader import load_capture, write_capture
from prometeo.tools import replay, simulate
from prometeo.tools.debug import debug_enabled, time_block


def test_synthetic_frames_start_with_handshake_and_skip_drops() -> None:
    frames = list(simulate.synthetic_frames(duration_s=2.0, drop_rate=0.1, seed=3))

    first = decode(frames[0].payload, frames[0].timestamp_ms)
    assert isinstance(first, TextEvent)
    assert first.text == "START"

    readings = [decode(f.payload, f.timestamp_ms) for f in frames[1:]]
    assert all(isinstance(r, Reading) for r in readings)
    assert 0 < len(readings) < 500
    assert all(b.timestamp_ms > a.timestamp_ms for a, b in zip(readings, readings[1:]))


def test_replay_reports_dropped_packets() -> None:
    frames = list(simulate.synthetic_frames(duration_s=2.0, drop_rate=0.1, seed=3))
    readings = [decode(f.payload, f.timestamp_ms) for f in frames[1:]]
    # Counters are sample indices modulo 256, one per 4 ms at 250 Hz.
    first_index = readings[0].timestamp_ms // 4
    last_index = readings[-1].timestamp_ms // 4
    expected_lost = (last_index - first_index + 1) - len(readings)

    _updates, stats = replay.replay_frames(frames)

    assert stats.total_packets == len(frames) - 1
    assert stats.lost_packets == expected_lost


def test_replay_of_alpha_tone_favours_alpha() -> None:
    frames = simulate.synthetic_frames(duration_s=6.0, tone_hz=10.0, seed=1)

    updates, stats = replay.replay_frames(frames)

    assert stats.lost_packets == 0
    assert stats.sample_rate_hz == pytest.approx(250.0, rel=0.01)
    assert len(updates) > 10
    last = updates[-1]
    assert max(last.band_powers, key=last.band_powers.get) == "alpha"
    assert last.dominant is not None


def test_update_rows_follow_band_headers() -> None:
    updates, _stats = replay.replay_frames(simulate.synthetic_frames(duration_s=2.0, seed=2))
    rows = replay.update_rows(updates, ["alpha", "beta"])

    assert len(rows) == len(updates)
    assert len(rows[0]) == 1 + 2 + 2 + 3
    assert rows[0][0] == updates[0].timestamp_ms


def test_simulate_main_writes_file(tmp_path: Path) -> None:
    out = tmp_path / "capture.jsonl"

    assert simulate.main([str(out), "--duration", "1", "--seed", "5"]) == 0

    frames = load_capture(out)
    assert len(frames) == 251


def test_simulate_main_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    assert simulate.main(["--duration", "0.1", "--noise", "0"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 26
    assert lines[0].startswith('{"type": "raw_eeg"')


def test_replay_main_writes_csv(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl"
    write_capture(capture, simulate.synthetic_frames(duration_s=3.0, seed=9))
    out = tmp_path / "bands.csv"

    assert replay.main([str(capture), "--out", str(out), "--transform", "dft"]) == 0

    with out.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))
    assert rows[0][:3] == ["timestamp_ms", "delta_raw", "theta_raw"]
    assert rows[0][-3:] == ["dominant", "control_pct", "control_active"]
    assert len(rows) > 1


def test_replay_main_rms_variant_leaves_other_bands_empty(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl"
    write_capture(capture, simulate.synthetic_frames(duration_s=2.0, seed=4))
    out = tmp_path / "beta.csv"

    assert replay.main([str(capture), "--out", str(out), "--estimator", "rms"]) == 0

    with out.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert rows
    assert all(row["dominant"] == "" for row in rows)
    assert all(float(row["alpha_raw"]) == 0.0 for row in rows)
    assert all(float(row["beta_raw"]) > 0.0 for row in rows)


def test_replay_main_missing_capture(tmp_path: Path) -> None:
    assert replay.main([str(tmp_path / "absent.jsonl")]) == 1


def test_time_block_only_emits_when_debug_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    messages = []

    monkeypatch.delenv("PROMETEO_DEBUG", raising=False)
    assert not debug_enabled()
    with time_block("quiet", emitter=messages.append):
        pass
    assert messages == []

    monkeypatch.setenv("PROMETEO_DEBUG", "1")
    assert debug_enabled()
    with time_block("loud", emitter=messages.append):
        pass
    assert len(messages) == 1
    assert "loud" in messages[0]
