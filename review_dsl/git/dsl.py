"""
Git DSL（rule-evaluation 层的入口对象）。

- 文件级信息（created/modified/deleted + commits）在组装时一次性拉齐
- 行级 structured diff 按文件懒加载，由调用方决定何时/取哪些文件
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anyio

from review_dsl.git.diff_parser import extract_changed_line_numbers
from review_dsl.git.diff_parser import extract_removed_line_numbers
from review_dsl.git.models import GitJSONDSL
from review_dsl.git.models import StructuredDiffEntry
from review_dsl.gitlab.adapter import git_json_dsl_for_gitlab
from review_dsl.gitlab.adapter import normalize_diff
from review_dsl.gitlab.client import GitLabAPI

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitDSL:
    """`GitJSONDSL` + 按需读取 diff/文件内容的能力。"""

    json: GitJSONDSL
    repo: str
    base_sha: str
    head_sha: str
    api: GitLabAPI
    diff_concurrency: int = 4

    @property
    def modified_files(self) -> tuple[str, ...]:
        return self.json.modified_files

    @property
    def created_files(self) -> tuple[str, ...]:
        return self.json.created_files

    @property
    def deleted_files(self) -> tuple[str, ...]:
        return self.json.deleted_files

    async def structured_diff_for_file(self, filename: str) -> list[StructuredDiffEntry]:
        diffs = await self.api.get_structured_diff_for_file(self.base_sha, self.head_sha, filename)
        return normalize_diff(diffs)

    async def structured_diffs_for_files(
        self,
        filenames: list[str],
        limit: int | None = None,
    ) -> dict[str, list[StructuredDiffEntry]]:
        """
        并发拉取多个文件的 structured diff。

        - 并发上限：`limit`，默认 `diff_concurrency`
        - 任意一个失败会取消其余请求，并抛出该请求自身的错误（例如 `HTTPError`），不返回部分结果
        """
        limiter = anyio.CapacityLimiter(limit or self.diff_concurrency)
        results: dict[str, list[StructuredDiffEntry]] = {}

        async def fetch(filename: str) -> None:
            async with limiter:
                results[filename] = await self.structured_diff_for_file(filename)

        try:
            async with anyio.create_task_group() as tg:
                for filename in filenames:
                    tg.start_soon(fetch, filename)
        except BaseExceptionGroup as group:
            raise _first_error(group) from group

        logger.info(f"Fetched structured diffs for {len(results)} file(s)")
        # 按调用方给出的顺序返回
        return {filename: results[filename] for filename in filenames}

    async def changed_line_numbers(self, filename: str) -> list[int]:
        """该文件新增行在目标侧的行号（用于行内评论定位）。"""
        return extract_changed_line_numbers(await self.structured_diff_for_file(filename))

    async def removed_line_numbers(self, filename: str) -> list[int]:
        """该文件删除行在源侧的行号。"""
        return extract_removed_line_numbers(await self.structured_diff_for_file(filename))

    async def file_contents(self, path: str, refspec: str | None = None) -> str:
        return await self.api.get_file_contents(path, refspec=refspec)


def _first_error(group: BaseExceptionGroup) -> BaseException:
    # task group 把子任务错误包成 ExceptionGroup，调用方只看原始错误
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


async def build_git_dsl(api: GitLabAPI, diff_concurrency: int = 4) -> GitDSL:
    """拉 MR 元数据 + changes + commits，组装 `GitDSL`。"""
    pull_request = await api.get_pull_request_info()
    json_dsl = await git_json_dsl_for_gitlab(api)
    repository = pull_request.from_ref.repository
    project_key = repository.project.get("key", "")
    # 与 compare 接口的 from/to 对应：from = 源分支，to = 目标分支
    return GitDSL(
        json=json_dsl,
        repo=f"projects/{project_key}/repos/{repository.slug}",
        base_sha=pull_request.from_ref.latest_commit,
        head_sha=pull_request.to_ref.latest_commit,
        api=api,
        diff_concurrency=diff_concurrency,
    )
