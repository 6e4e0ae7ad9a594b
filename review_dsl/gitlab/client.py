"""
GitLab API 客户端（外部系统连接器）。

约定：
- 这里只做“HTTP 调用 + 错误处理 + schema 校验”，不做归一化。
- 发生错误时**直接抛错**，不要吞异常，也不重试（所有读接口都是幂等的，由上游决定是否重跑）。
- 分页是严格串行的：下一页的 cursor 来自上一页的响应。
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import anyio
import httpx

from review_dsl.config import RepoCredentials
from review_dsl.errors import HTTPError
from review_dsl.gitlab.schemas import ActivityPage
from review_dsl.gitlab.schemas import ChangePage
from review_dsl.gitlab.schemas import ChangeRecord
from review_dsl.gitlab.schemas import CommitPage
from review_dsl.gitlab.schemas import DiffResponse
from review_dsl.gitlab.schemas import PlatformCommit
from review_dsl.gitlab.schemas import PlatformDiff
from review_dsl.gitlab.schemas import PullRequest
from review_dsl.gitlab.schemas import PullRequestActivity
from review_dsl.gitlab.schemas import RepoMetaData

logger = logging.getLogger(__name__)


def raise_if_not_ok(response: httpx.Response) -> None:
    """非 2xx 统一转成 `HTTPError`（status + reason）。"""
    if not response.is_success:
        raise HTTPError(status=response.status_code, reason=response.reason_phrase, url=str(response.url))


class GitLabAPI:
    """MR 维度的 GitLab API client。一个实例只服务一次 review run。"""

    def __init__(
        self,
        repo_metadata: RepoMetaData,
        credentials: RepoCredentials,
        http_client: httpx.AsyncClient,
    ) -> None:
        """
        - repo_metadata: repoSlug + pullRequestID（来自 CI 环境）
        - credentials: host + token 或 username/password
        - http_client: 复用的 httpx.AsyncClient（timeout/代理在创建时配置）
        """
        self.repo_metadata = repo_metadata
        self.credentials = credentials
        self._http_client = http_client
        # unset -> fetched-and-cached；MR 身份在一次 run 内不变，不需要失效
        self._pull_request: PullRequest | None = None
        self._pull_request_lock = anyio.Lock()

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", **self.credentials.auth_header()}

    def get_pr_base_path(self) -> str:
        return f"projects/{self.repo_metadata.repo_slug}/merge_requests/{self.repo_metadata.pull_request_id}"

    async def _get(self, path: str, params: dict[str, object] | None = None) -> httpx.Response:
        url = f"{self.credentials.base_url}/{path.lstrip('/')}"
        logger.debug(f"GET {url}")
        return await self._http_client.get(url, headers=self._headers(), params=params)

    async def get_pull_request_info(self) -> PullRequest:
        """MR 元数据。每个 client 实例最多请求一次，之后返回缓存。"""
        async with self._pull_request_lock:
            if self._pull_request is not None:
                return self._pull_request
            response = await self._get(self.get_pr_base_path())
            raise_if_not_ok(response)
            self._pull_request = PullRequest.model_validate(response.json())
            return self._pull_request

    async def get_pull_request_commits(self) -> list[PlatformCommit]:
        response = await self._get(f"{self.get_pr_base_path()}/commits")
        raise_if_not_ok(response)
        return CommitPage.model_validate(response.json()).values

    async def get_structured_diff_for_file(self, base: str, head: str, filename: str) -> list[PlatformDiff]:
        path = f"rest/api/1.0/{self.repo_metadata.repo_slug}/compare/diff/{quote(filename, safe='/')}"
        response = await self._get(path, params={"withComments": "false", "from": base, "to": head})
        raise_if_not_ok(response)
        return DiffResponse.model_validate(response.json()).diffs

    async def get_pull_request_changes(self) -> list[ChangeRecord]:
        """
        拉取 MR 的全部 change records。

        - 从 `start=0` 开始，按 `nextPageStart` 前进，直到它为 null
        - 按页顺序拼接，不去重、不重排
        - 任意一页失败直接抛错，已拉到的页全部丢弃（不返回部分结果）
        """
        next_page_start: int | None = 0
        values: list[ChangeRecord] = []
        while next_page_start is not None:
            response = await self._get(f"{self.get_pr_base_path()}/changes", params={"start": next_page_start})
            raise_if_not_ok(response)
            page = ChangePage.model_validate(response.json())
            values.extend(page.values)
            next_page_start = page.next_page_start
        logger.info(f"Fetched {len(values)} change record(s) for {self.get_pr_base_path()}")
        return values

    async def get_pull_request_comments(self) -> list[PullRequestActivity]:
        response = await self._get(f"{self.get_pr_base_path()}/activities", params={"fromType": "COMMENT"})
        raise_if_not_ok(response)
        return ActivityPage.model_validate(response.json()).values

    async def get_pull_request_activities(self) -> list[PullRequestActivity]:
        response = await self._get(f"{self.get_pr_base_path()}/activities", params={"fromType": "ACTIVITY"})
        raise_if_not_ok(response)
        return ActivityPage.model_validate(response.json()).values

    async def get_file_contents(self, file_path: str, repo_slug: str | None = None, refspec: str | None = None) -> str:
        """
        读取文件原文。

        注意：404 不是错误（文件在该 ref 上不存在），返回空字符串。
        """
        slug = repo_slug or self.repo_metadata.repo_slug
        params = {"at": refspec} if refspec else None
        response = await self._get(f"{slug}/raw/{quote(file_path, safe='/')}", params=params)
        if response.status_code == 404:
            return ""
        raise_if_not_ok(response)
        return response.text
