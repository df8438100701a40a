import os

import pytest

from tabl import output_paths
from tabl.exceptions import OutputPathError, PathCollisionError
from tabl.models.pathmapping import OutputPolicy


def test_in_place_is_identity(tmp_path):
    inputs = [str(tmp_path / "a.parquet"), str(tmp_path / "sub" / "b.parquet")]
    mapping = output_paths.derive_output_paths(inputs, OutputPolicy())
    assert mapping.outputs == inputs
    assert mapping.inputs == inputs


def test_directory_redirect_preserves_relative_structure(tmp_path):
    root = tmp_path / "a"
    inputs = [str(root / "b" / "c.parquet"), str(root / "d.parquet")]
    out = tmp_path / "out"

    mapping = output_paths.derive_output_paths(inputs, OutputPolicy(output_dir=str(out)))

    assert mapping.outputs == [str(out / "b" / "c.parquet"), str(out / "d.parquet")]


def test_affix_composes_prefix_and_postfix(tmp_path):
    inputs = [str(tmp_path / "file.parquet")]
    mapping = output_paths.derive_output_paths(inputs, OutputPolicy(prefix="p_", postfix="_q"))
    assert mapping.outputs == [str(tmp_path / "p_file_q.parquet")]


def test_affix_applies_after_directory_rewrite(tmp_path):
    inputs = [str(tmp_path / "in" / "x" / "one.parquet"), str(tmp_path / "in" / "two.parquet")]
    out = tmp_path / "out"
    policy = OutputPolicy(output_dir=str(out), postfix="_v2")

    mapping = output_paths.derive_output_paths(inputs, policy)

    assert mapping.outputs == [str(out / "x" / "one_v2.parquet"), str(out / "two_v2.parquet")]


def test_relative_output_dir_is_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    inputs = [str(tmp_path / "src" / "a.parquet")]
    mapping = output_paths.derive_output_paths(inputs, OutputPolicy(output_dir="out"))
    assert mapping.outputs == [os.path.join(os.getcwd(), "out", "a.parquet")]


def test_identical_outputs_raise_collision(tmp_path, monkeypatch):
    x = str(tmp_path / "x.parquet")
    y = str(tmp_path / "y.parquet")
    same = str(tmp_path / "out.parquet")
    monkeypatch.setattr(output_paths, "apply_affix", lambda path, prefix, postfix: same)

    with pytest.raises(PathCollisionError) as excinfo:
        output_paths.derive_output_paths([x, y], OutputPolicy(prefix="p_"))

    assert excinfo.value.inputs == (x, y)
    assert excinfo.value.output == same


def test_output_overwriting_another_input_is_rejected(tmp_path):
    a = str(tmp_path / "a.parquet")
    pa = str(tmp_path / "p_a.parquet")

    with pytest.raises(PathCollisionError) as excinfo:
        output_paths.derive_output_paths([a, pa], OutputPolicy(prefix="p_"))

    assert excinfo.value.inputs == (a, pa)


def test_check_collisions_allows_distinct_pairs():
    output_paths.check_collisions([("/d/a", "/o/a"), ("/d/b", "/o/b")])


def test_common_root_and_display_paths(tmp_path):
    paths = [str(tmp_path / "x" / "1.parquet"), str(tmp_path / "y" / "2.parquet")]
    assert output_paths.common_root(paths) == str(tmp_path)
    assert output_paths.display_paths(paths) == [
        os.path.join("x", "1.parquet"),
        os.path.join("y", "2.parquet"),
    ]
    assert output_paths.display_paths(paths, absolute=True) == paths


def test_common_root_of_nothing_raises():
    with pytest.raises(OutputPathError):
        output_paths.common_root([])


def test_count_existing_is_read_only(tmp_path):
    present = tmp_path / "present.parquet"
    present.write_bytes(b"x")
    absent = tmp_path / "absent.parquet"

    assert output_paths.count_existing([str(present), str(absent)]) == 1
    assert not absent.exists()


def test_flattened_outputs_sharing_a_name_collide(tmp_path):
    first = str(tmp_path / "2023" / "events.parquet")
    second = str(tmp_path / "2024" / "events.parquet")
    out = tmp_path / "flat"
    pairs = [
        (path, output_paths.apply_affix(str(out / os.path.basename(path)), postfix="_clean"))
        for path in (first, second)
    ]

    with pytest.raises(PathCollisionError) as excinfo:
        output_paths.check_collisions(pairs)

    assert excinfo.value.inputs == (first, second)
    assert excinfo.value.output == str(out / "events_clean.parquet")


def test_derived_affix_output_clobbering_input_is_rejected(tmp_path):
    original = str(tmp_path / "events.parquet")
    already_cleaned = str(tmp_path / "events_clean.parquet")

    with pytest.raises(PathCollisionError) as excinfo:
        output_paths.derive_output_paths([original, already_cleaned], OutputPolicy(postfix="_clean"))

    assert excinfo.value.output == already_cleaned
