import io
import json
from pathlib import Path

from resumelog.checkpoint import CheckpointLog
from resumelog.codec import Codec
from resumelog.config import build_settings
from resumelog.offsets import OffsetStore
from resumelog.reader import RecordReader
from resumelog.summary import Elapsed, RunSummary


def make_summary(tmp_path: Path, now: float = 4723) -> RunSummary:
    settings = build_settings(log_dir=tmp_path, prefix="job")
    codec = Codec(settings.data_kind)
    log = CheckpointLog(settings, codec, RecordReader(codec, OffsetStore()))
    return RunSummary(log, "job", start_time=1000, clock=lambda: now)


def test_elapsed_breakdown(tmp_path: Path):
    summary = make_summary(tmp_path)
    assert summary.elapsed(1000 + 3723) == Elapsed(hours=1, minutes=2, seconds=3)
    assert summary.elapsed(500) == Elapsed(0, 0, 0)


def test_end_time_is_set_once(tmp_path: Path):
    summary = make_summary(tmp_path)
    assert summary.end_time == 4723
    assert summary.record_end(9999) == 4723
    assert summary.elapsed() == Elapsed(1, 2, 3)


def test_explicit_end_time_wins(tmp_path: Path):
    summary = make_summary(tmp_path)
    summary.record_end(1061)
    assert summary.end_time == 1061
    assert summary.elapsed() == Elapsed(0, 1, 1)


def test_display_prints_once(tmp_path: Path):
    summary = make_summary(tmp_path)
    summary.log.record_success(2)
    summary.log.record_failure(3)
    stream = io.StringIO()

    assert summary.display(stream=stream) is True
    assert summary.display(stream=stream) is False
    assert summary.display("other", stream=stream) is False

    output = stream.getvalue()
    assert output.count("job results") == 1
    assert "all     num : [ 2" in output
    assert "success num : [ 1" in output
    assert "failure num : [ 1" in output


def test_write_json(tmp_path: Path):
    summary = make_summary(tmp_path)
    summary.log.record_success(4)
    path = tmp_path / "out" / "summary.json"
    summary.write_json(path)

    data = json.loads(path.read_text())
    assert data["count"] == 1
    assert data["success_count"] == 1
    assert data["elapsed"] == {"hours": 1, "minutes": 2, "seconds": 3}
