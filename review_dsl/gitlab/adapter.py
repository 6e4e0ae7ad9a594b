"""
GitLab -> git DSL adapter。

职责：
- 将平台原生的 changes / commits / structured diff 转换为平台无关的 git 模型
- 只做数据归一化，不做业务决策
- 全部是纯函数；输入非法直接抛错，不返回部分结果
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum

from review_dsl.errors import UnhandledChangeTypeError
from review_dsl.errors import UnknownSegmentTypeError
from review_dsl.git.models import ChangeLineType
from review_dsl.git.models import ChangeSet
from review_dsl.git.models import GitActor
from review_dsl.git.models import GitCommit
from review_dsl.git.models import GitJSONDSL
from review_dsl.git.models import StructuredDiffChange
from review_dsl.git.models import StructuredDiffChunk
from review_dsl.git.models import StructuredDiffEntry
from review_dsl.gitlab.client import GitLabAPI
from review_dsl.gitlab.schemas import ChangeRecord
from review_dsl.gitlab.schemas import HunkSegment
from review_dsl.gitlab.schemas import PlatformCommit
from review_dsl.gitlab.schemas import PlatformDiff
from review_dsl.gitlab.schemas import PlatformUser
from review_dsl.gitlab.schemas import RepoMetaData

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    ADD = "ADD"
    MODIFY = "MODIFY"
    MOVE = "MOVE"
    DELETE = "DELETE"


class SegmentType(str, Enum):
    ADDED = "ADDED"
    CONTEXT = "CONTEXT"
    REMOVED = "REMOVED"


SEGMENT_LINE_TYPES: dict[SegmentType, ChangeLineType] = {
    SegmentType.ADDED: "add",
    SegmentType.CONTEXT: "normal",
    SegmentType.REMOVED: "del",
}


def _change_type(record: ChangeRecord) -> ChangeType:
    try:
        return ChangeType(record.type)
    except ValueError as exc:
        raise UnhandledChangeTypeError(record.type) from exc


def normalize_changes(records: list[ChangeRecord]) -> ChangeSet:
    """
    将 change records 归约为 created/modified/deleted 三组路径。

    - MOVE = 删除 srcPath + 新增 path（不单独区分 rename）
    - 保持到达顺序，不去重（平台重复返回时结果也会重复）
    - 遇到未知 type 立即抛 `UnhandledChangeTypeError`
    """
    created: list[str] = []
    modified: list[str] = []
    deleted: list[str] = []
    for record in records:
        change_type = _change_type(record)
        path = str(record.path)
        if change_type is ChangeType.ADD:
            created.append(path)
        elif change_type is ChangeType.MODIFY:
            modified.append(path)
        elif change_type is ChangeType.MOVE:
            if record.src_path is None:
                raise ValueError(f"MOVE change record is missing srcPath: {path}")
            created.append(path)
            deleted.append(str(record.src_path))
        elif change_type is ChangeType.DELETE:
            deleted.append(path)
        else:
            raise UnhandledChangeTypeError(record.type)
    return ChangeSet(created=tuple(created), modified=tuple(modified), deleted=tuple(deleted))


def epoch_millis_to_iso(timestamp: int) -> str:
    """epoch 毫秒 -> ISO-8601（UTC，毫秒精度，`Z` 结尾）。"""
    seconds, millis = divmod(timestamp, 1000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def _actor(user: PlatformUser, timestamp: int) -> GitActor:
    return GitActor(name=user.name, email=user.email_address, date=epoch_millis_to_iso(timestamp))


def normalize_commit(record: PlatformCommit, repo_metadata: RepoMetaData, host: str) -> GitCommit:
    """
    平台 commit -> 平台无关 commit。

    committer 缺失时直接复制 author（这是约定的 fallback，不是错误）。
    """
    author = _actor(record.author, record.author_timestamp)
    if record.committer is None:
        committer = author
    else:
        committer_timestamp = record.committer_timestamp
        if committer_timestamp is None:
            committer_timestamp = record.author_timestamp
        committer = _actor(record.committer, committer_timestamp)
    return GitCommit(
        sha=record.id,
        parents=tuple(parent.id for parent in record.parents),
        author=author,
        committer=committer,
        message=record.message,
        tree=None,
        url=f"{host.rstrip('/')}/{repo_metadata.repo_slug}/commits/{record.id}",
    )


def _segment_line_type(segment: HunkSegment) -> ChangeLineType:
    try:
        return SEGMENT_LINE_TYPES[SegmentType(segment.type)]
    except ValueError as exc:
        raise UnknownSegmentTypeError(segment.type) from exc


def _flatten_segments(segments: list[HunkSegment]) -> tuple[StructuredDiffChange, ...]:
    # 按 segment 顺序拼接，不交错
    changes: list[StructuredDiffChange] = []
    for segment in segments:
        line_type = _segment_line_type(segment)
        for line in segment.lines:
            changes.append(
                StructuredDiffChange(
                    type=line_type,
                    content=line.line,
                    source_line=line.source,
                    destination_line=line.destination,
                )
            )
    return tuple(changes)


def normalize_diff(diffs: list[PlatformDiff]) -> list[StructuredDiffEntry]:
    """
    结构化 diff -> 逐行变更流（每个 hunk 一个 chunk）。

    - 新增/删除文件缺少一侧 path，对应字段为 None
    - 没有 hunks（例如二进制文件）时 chunks 为空
    - 不校验 hunk 边界/行号重叠，原样透传给 rule-evaluation 层
    """
    entries: list[StructuredDiffEntry] = []
    for diff in diffs:
        hunks = diff.hunks or []
        entries.append(
            StructuredDiffEntry(
                from_path=str(diff.source) if diff.source is not None else None,
                to_path=str(diff.destination) if diff.destination is not None else None,
                chunks=tuple(StructuredDiffChunk(changes=_flatten_segments(hunk.segments)) for hunk in hunks),
            )
        )
    return entries


def build_git_json_dsl(change_set: ChangeSet, commits: list[GitCommit]) -> GitJSONDSL:
    return GitJSONDSL(
        modified_files=change_set.modified,
        created_files=change_set.created,
        deleted_files=change_set.deleted,
        commits=tuple(commits),
    )


async def git_json_dsl_for_gitlab(api: GitLabAPI) -> GitJSONDSL:
    """
    组装 `GitJSONDSL`：changes（全分页）+ commits。

    网络错误/归一化错误都不捕获，直接传播到顶层 run。
    """
    records = await api.get_pull_request_changes()
    platform_commits = await api.get_pull_request_commits()
    commits = [normalize_commit(c, api.repo_metadata, api.credentials.base_url) for c in platform_commits]
    change_set = normalize_changes(records)
    logger.info(
        f"Git DSL: {len(change_set.created)} created, {len(change_set.modified)} modified, "
        f"{len(change_set.deleted)} deleted, {len(commits)} commit(s)"
    )
    return build_git_json_dsl(change_set=change_set, commits=commits)
