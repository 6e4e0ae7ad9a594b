"""
平台无关的 git/PR 领域模型（Pydantic）。

用途：
- 作为 rule-evaluation 层的输入结构
- 全部 frozen：组装完成后不可再修改
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ChangeLineType = Literal["add", "del", "normal"]


class CanonicalModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ChangeSet(CanonicalModel):
    """changes 归约后的三组文件路径。按到达顺序保留，不去重。"""

    created: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()


class GitActor(CanonicalModel):
    name: str
    email: str | None
    date: str


class GitCommit(CanonicalModel):
    """平台无关的 commit。`tree` 平台不提供，恒为 None。"""

    sha: str
    parents: tuple[str, ...]
    author: GitActor
    committer: GitActor
    message: str
    tree: None = None
    url: str


class GitJSONDSL(CanonicalModel):
    modified_files: tuple[str, ...]
    created_files: tuple[str, ...]
    deleted_files: tuple[str, ...]
    commits: tuple[GitCommit, ...]


class StructuredDiffChange(CanonicalModel):
    type: ChangeLineType
    content: str
    source_line: int | None = Field(alias="sourceLine")
    destination_line: int | None = Field(alias="destinationLine")


class StructuredDiffChunk(CanonicalModel):
    changes: tuple[StructuredDiffChange, ...]


class StructuredDiffEntry(CanonicalModel):
    """单文件的逐行变更流。新增文件没有 from，删除文件没有 to。"""

    from_path: str | None = Field(alias="from")
    to_path: str | None = Field(alias="to")
    chunks: tuple[StructuredDiffChunk, ...]
