"""
GitLab API response schemas（Pydantic）。

为什么要单独放 schema：
- 平台返回的 payload 是 camelCase 且嵌套很深，直接用 dict 容易写错 key
- schema 校验失败会立刻暴露问题（比“默默 None”安全）

说明：
- 这里的字段只覆盖 DSL 组装所需子集，多余字段忽略
- change/segment 的 `type` 保留为字符串，是否合法由 adapter 判定（需要给出明确的错误类型）
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PlatformModel(BaseModel):
    """平台原生记录的基类：camelCase alias，同时允许按字段名构造（便于测试）。"""

    model_config = ConfigDict(populate_by_name=True)


class RepoMetaData(PlatformModel):
    """仓库 + MR 标识（由 CI 环境提供）。"""

    repo_slug: str = Field(alias="repoSlug")
    pull_request_id: str = Field(alias="pullRequestID")


class PlatformPath(PlatformModel):
    """平台的 path 对象，`toString` 是仓库内相对路径。"""

    to_string: str = Field(alias="toString")
    components: list[str] = Field(default_factory=list)
    name: str | None = None
    extension: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_plain_string(cls, data: object) -> object:
        if isinstance(data, str):
            return {"toString": data}
        return data

    def __str__(self) -> str:
        return self.to_string


class ChangeRecord(PlatformModel):
    """单个文件级变更。`srcPath` 只在 MOVE 时出现。"""

    type: str
    path: PlatformPath
    src_path: PlatformPath | None = Field(default=None, alias="srcPath")


class ChangePage(PlatformModel):
    """changes 接口的一页。`nextPageStart` 为 null/缺失表示最后一页。"""

    values: list[ChangeRecord]
    next_page_start: int | None = Field(default=None, alias="nextPageStart")
    is_last_page: bool | None = Field(default=None, alias="isLastPage")


class PlatformUser(PlatformModel):
    name: str
    email_address: str | None = Field(default=None, alias="emailAddress")
    display_name: str | None = Field(default=None, alias="displayName")


class CommitRef(PlatformModel):
    id: str
    display_id: str | None = Field(default=None, alias="displayId")


class PlatformCommit(PlatformModel):
    """平台原生 commit。committer 可能缺失（此时按 author 处理）。"""

    id: str
    display_id: str | None = Field(default=None, alias="displayId")
    author: PlatformUser
    author_timestamp: int = Field(alias="authorTimestamp")
    committer: PlatformUser | None = None
    committer_timestamp: int | None = Field(default=None, alias="committerTimestamp")
    message: str
    parents: list[CommitRef] = Field(default_factory=list)


class CommitPage(PlatformModel):
    values: list[PlatformCommit]


class SegmentLine(PlatformModel):
    line: str
    source: int | None = None
    destination: int | None = None


class HunkSegment(PlatformModel):
    """hunk 内按类型分组的连续行（ADDED/CONTEXT/REMOVED）。"""

    type: str
    lines: list[SegmentLine]
    truncated: bool = False


class Hunk(PlatformModel):
    source_line: int | None = Field(default=None, alias="sourceLine")
    source_span: int | None = Field(default=None, alias="sourceSpan")
    destination_line: int | None = Field(default=None, alias="destinationLine")
    destination_span: int | None = Field(default=None, alias="destinationSpan")
    segments: list[HunkSegment]


class PlatformDiff(PlatformModel):
    """单文件的结构化 diff。新增/删除文件只有一侧 path；二进制文件没有 hunks。"""

    source: PlatformPath | None = None
    destination: PlatformPath | None = None
    hunks: list[Hunk] | None = None
    truncated: bool = False


class DiffResponse(PlatformModel):
    diffs: list[PlatformDiff]


class Repository(PlatformModel):
    slug: str
    name: str | None = None
    project: dict[str, object] = Field(default_factory=dict)


class PullRequestRef(PlatformModel):
    id: str
    display_id: str | None = Field(default=None, alias="displayId")
    latest_commit: str = Field(alias="latestCommit")
    repository: Repository


class PullRequest(PlatformModel):
    """MR 元数据（只取 DSL 组装需要的部分）。"""

    id: int
    version: int | None = None
    title: str
    description: str | None = None
    state: str
    from_ref: PullRequestRef = Field(alias="fromRef")
    to_ref: PullRequestRef = Field(alias="toRef")
    author: dict[str, object] = Field(default_factory=dict)


class PullRequestComment(PlatformModel):
    id: int
    version: int
    text: str
    author: PlatformUser
    created_date: int | None = Field(default=None, alias="createdDate")
    updated_date: int | None = Field(default=None, alias="updatedDate")


class CommentAnchor(PlatformModel):
    line: int | None = None
    line_type: str | None = Field(default=None, alias="lineType")
    file_type: str | None = Field(default=None, alias="fileType")
    path: str | None = None


class PullRequestActivity(PlatformModel):
    """activities 接口的单条记录；只有评论类 activity 带 `comment`。"""

    id: int
    action: str
    comment: PullRequestComment | None = None
    comment_anchor: CommentAnchor | None = Field(default=None, alias="commentAnchor")


class ActivityPage(PlatformModel):
    values: list[PullRequestActivity]
