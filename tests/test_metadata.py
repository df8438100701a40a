import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from tabl import aggregate, metadata
from tabl.exceptions import UnreadableMetadataError


def write_parquet(path, **columns):
    path.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(pa.table(columns), str(path))
    return str(path)


def test_read_file_metadata_reads_footer(tmp_path):
    path = write_parquet(tmp_path / "a.parquet", id=[1, 2, 3], name=["x", "y", "z"])

    info = metadata.read_file_metadata(path)

    assert info.path == path
    assert info.num_rows == 3
    assert info.num_bytes == (tmp_path / "a.parquet").stat().st_size
    assert info.schema.columns == (("id", "int64"), ("name", "string"))
    assert info.num_row_groups == 1


def test_read_file_metadata_names_unreadable_file(tmp_path, monkeypatch):
    bad = tmp_path / "bad.parquet"
    bad.write_bytes(b"not-a-parquet-file")
    logged: list[str] = []
    monkeypatch.setattr(metadata, "log_error", logged.append)

    with pytest.raises(UnreadableMetadataError) as excinfo:
        metadata.read_file_metadata(str(bad))

    assert excinfo.value.path == str(bad)
    assert any("bad.parquet" in entry for entry in logged)


def test_collect_metadata_is_index_aligned(tmp_path):
    files = [
        write_parquet(tmp_path / f"part-{index:02d}.parquet", value=list(range(index + 1)))
        for index in range(12)
    ]

    results, skipped = metadata.collect_metadata(list(reversed(files)), max_workers=4)

    assert skipped == []
    assert [item.path for item in results] == list(reversed(files))
    assert [item.num_rows for item in results] == list(range(12, 0, -1))


def test_collect_metadata_hard_fails_on_first_bad_file(tmp_path):
    good = write_parquet(tmp_path / "good.parquet", a=[1])
    bad = tmp_path / "bad.parquet"
    bad.write_bytes(b"junk")

    with pytest.raises(UnreadableMetadataError) as excinfo:
        metadata.collect_metadata([good, str(bad)], max_workers=2)

    assert excinfo.value.path == str(bad)


def test_collect_metadata_skip_policy_reports_skipped(tmp_path, monkeypatch):
    good = write_parquet(tmp_path / "good.parquet", a=[1, 2])
    bad = tmp_path / "bad.parquet"
    bad.write_bytes(b"junk")
    warnings: list[str] = []
    monkeypatch.setattr(metadata, "log_warning", warnings.append)

    results, skipped = metadata.collect_metadata([str(bad), good], skip_unreadable=True)

    assert [item.path for item in results] == [good]
    assert skipped == [str(bad)]
    assert any("bad.parquet" in entry for entry in warnings)


def test_schemas_and_row_counts_are_aligned(tmp_path):
    files = [
        write_parquet(tmp_path / "one.parquet", a=[1, 2]),
        write_parquet(tmp_path / "two.parquet", b=["x"]),
        write_parquet(tmp_path / "three.parquet", a=[1, 2, 3, 4]),
    ]

    schemas = metadata.schemas_of(files)
    counts = metadata.row_counts_of(files)

    assert len(schemas) == len(files)
    assert [schema.names for schema in schemas] == [["a"], ["b"], ["a"]]
    assert counts == [2, 1, 4]
    assert sum(counts) == aggregate.aggregate(files).total_rows


def test_collect_metadata_of_nothing():
    assert metadata.collect_metadata([]) == ([], [])
