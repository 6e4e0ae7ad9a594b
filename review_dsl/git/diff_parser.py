from __future__ import annotations

from review_dsl.git.models import StructuredDiffEntry


def extract_changed_line_numbers(entries: list[StructuredDiffEntry]) -> list[int]:
    changed: list[int] = []
    for entry in entries:
        for chunk in entry.chunks:
            for change in chunk.changes:
                if change.type != "add":
                    continue
                if change.destination_line is None:
                    raise ValueError(f"Added line without destination line number in: {entry.to_path}")
                changed.append(change.destination_line)
    return changed


def extract_removed_line_numbers(entries: list[StructuredDiffEntry]) -> list[int]:
    removed: list[int] = []
    for entry in entries:
        for chunk in entry.chunks:
            # del 行只有 source 行号
            removed.extend(c.source_line for c in chunk.changes if c.type == "del" and c.source_line is not None)
    return removed
