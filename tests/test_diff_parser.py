from __future__ import annotations

import pytest

from review_dsl.git.diff_parser import extract_changed_line_numbers
from review_dsl.git.diff_parser import extract_removed_line_numbers
from review_dsl.git.models import StructuredDiffChange
from review_dsl.git.models import StructuredDiffChunk
from review_dsl.git.models import StructuredDiffEntry


def _entry(*changes: StructuredDiffChange) -> StructuredDiffEntry:
    return StructuredDiffEntry(from_path="a.py", to_path="a.py", chunks=(StructuredDiffChunk(changes=changes),))


def test_extract_changed_line_numbers() -> None:
    entry = _entry(
        StructuredDiffChange(type="normal", content="line1", source_line=1, destination_line=1),
        StructuredDiffChange(type="del", content="line2", source_line=2, destination_line=None),
        StructuredDiffChange(type="add", content="line2_new", source_line=None, destination_line=2),
        StructuredDiffChange(type="add", content="line3_new", source_line=None, destination_line=3),
    )
    assert extract_changed_line_numbers([entry]) == [2, 3]
    assert extract_removed_line_numbers([entry]) == [2]


def test_added_line_without_destination_raises() -> None:
    entry = _entry(StructuredDiffChange(type="add", content="x", source_line=None, destination_line=None))
    with pytest.raises(ValueError):
        extract_changed_line_numbers([entry])
