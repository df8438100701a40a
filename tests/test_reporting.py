import json

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from tabl import aggregate, reporting
from tabl.exceptions import ReportError
from tabl.models.columnspec import ColumnSpec
from tabl.models.pathmapping import OutputPolicy, PathMapping


def test_summary_report_structure(tmp_path):
    path = tmp_path / "a.parquet"
    pq.write_table(pa.table({"id": [1, 2]}), str(path))
    summary = aggregate.aggregate([str(path)])

    report = reporting.summary_report(summary, include_files=True)

    assert report["total_files"] == 1
    assert report["total_rows"] == 2
    assert report["schemas"][0]["columns"] == [{"name": "id", "type": "int64"}]
    assert report["files"][0]["path"] == str(path)


def test_plan_report_and_json_file(tmp_path):
    mapping = PathMapping(pairs=(("/in/a.parquet", "/out/a.parquet"),))
    policy = OutputPolicy(output_dir="/out")

    report = reporting.plan_report("drop", [ColumnSpec("x")], mapping, policy, existing_outputs=1)
    outfile = tmp_path / "reports" / "plan.json"
    reporting.write_json_report(report, str(outfile))

    saved = json.loads(outfile.read_text(encoding="utf-8"))
    assert saved["action"] == "drop"
    assert saved["columns"] == ["x"]
    assert saved["in_place"] is False
    assert saved["existing_outputs"] == 1
    assert saved["pairs"] == [{"input": "/in/a.parquet", "output": "/out/a.parquet"}]


def test_write_log_to_explicit_file(tmp_path):
    outfile = tmp_path / "run.log"
    reporting.write_log(["[ERROR] boom", "plain entry"], outfile=str(outfile))
    lines = outfile.read_text(encoding="utf-8").splitlines()
    assert lines[0].endswith("[ERROR] boom")
    assert lines[1].endswith("[INFO] plain entry")


def test_write_json_report_failure_raises_report_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")

    with pytest.raises(ReportError) as excinfo:
        reporting.write_json_report({"status": "OK"}, str(blocker / "report.json"))

    assert excinfo.value.path == str(blocker / "report.json")


def test_unwritable_log_file_is_rejected_and_disabled(tmp_path, monkeypatch):
    monkeypatch.delenv(reporting.LOG_FILE_ENV, raising=False)
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")

    with pytest.raises(ReportError):
        reporting.configure_log_file(str(blocker / "tabl.log"))

    assert reporting.current_log_file() is None
    reporting.write_log(["[ERROR] still reportable"])


def test_log_file_failing_mid_run_is_disabled(tmp_path, monkeypatch):
    monkeypatch.delenv(reporting.LOG_FILE_ENV, raising=False)
    log_path = tmp_path / "logs" / "tabl.log"
    reporting.configure_log_file(str(log_path))
    log_path.unlink()
    log_path.parent.rmdir()
    (tmp_path / "logs").write_text("replaced by a file")

    try:
        with pytest.raises(ReportError):
            reporting.write_log(["[INFO] lost"])
        assert reporting.current_log_file() is None
    finally:
        reporting.configure_log_file(None)
