from __future__ import annotations

import pytest

from review_dsl.errors import UnhandledChangeTypeError
from review_dsl.gitlab.adapter import normalize_changes
from review_dsl.gitlab.schemas import ChangeRecord


def _record(change_type: str, path: str, src_path: str | None = None) -> ChangeRecord:
    payload: dict[str, object] = {"type": change_type, "path": {"toString": path}}
    if src_path is not None:
        payload["srcPath"] = {"toString": src_path}
    return ChangeRecord.model_validate(payload)


def test_move_is_delete_plus_create() -> None:
    result = normalize_changes([_record("MOVE", "new/name.py", src_path="old/name.py")])
    assert result.created == ("new/name.py",)
    assert result.deleted == ("old/name.py",)
    assert result.modified == ()


def test_each_path_lands_in_one_bucket_in_arrival_order() -> None:
    records = [
        _record("ADD", "a.py"),
        _record("MODIFY", "b.py"),
        _record("DELETE", "c.py"),
        _record("ADD", "d.py"),
        _record("MODIFY", "e.py"),
    ]
    result = normalize_changes(records)
    assert result.created == ("a.py", "d.py")
    assert result.modified == ("b.py", "e.py")
    assert result.deleted == ("c.py",)


def test_unknown_change_type_fails_fast() -> None:
    records = [_record("ADD", "a.py"), _record("RENAME", "b.py"), _record("DELETE", "c.py")]
    with pytest.raises(UnhandledChangeTypeError) as exc_info:
        normalize_changes(records)
    assert exc_info.value.change_type == "RENAME"


def test_move_without_src_path_is_rejected() -> None:
    with pytest.raises(ValueError):
        normalize_changes([_record("MOVE", "new.py")])


def test_duplicate_records_are_preserved() -> None:
    # 平台重复返回时不去重
    result = normalize_changes([_record("MODIFY", "a.py"), _record("MODIFY", "a.py")])
    assert result.modified == ("a.py", "a.py")


def test_plain_string_paths_are_accepted() -> None:
    record = ChangeRecord.model_validate({"type": "ADD", "path": "src/x.py"})
    assert normalize_changes([record]).created == ("src/x.py",)


def test_normalization_is_repeatable() -> None:
    records = [_record("ADD", "a.py"), _record("MOVE", "b.py", src_path="c.py")]
    assert normalize_changes(records) == normalize_changes(records)


def test_empty_input_gives_empty_sets() -> None:
    result = normalize_changes([])
    assert (result.created, result.modified, result.deleted) == ((), (), ())
