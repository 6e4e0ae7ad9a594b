"""
GitLab CI 环境（只读取环境变量，不做其他 CI provider 的探测）。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from review_dsl.gitlab.schemas import RepoMetaData


def _ensure_env_keys_exist(environ: Mapping[str, str], keys: tuple[str, ...]) -> bool:
    return all(environ.get(key) for key in keys)


@dataclass(frozen=True)
class GitLabCI:
    environ: Mapping[str, str]

    name: str = "Gitlab"

    @property
    def is_ci(self) -> bool:
        return _ensure_env_keys_exist(self.environ, ("GITLAB_CI",))

    @property
    def is_pr(self) -> bool:
        if not _ensure_env_keys_exist(self.environ, ("GITLAB_CI", "CI_PROJECT_PATH")):
            return False
        return self.pull_request_id.isdigit() and int(self.pull_request_id) > 0

    @property
    def pull_request_id(self) -> str:
        merge_request_id = self.environ.get("CI_MERGE_REQUEST_ID")
        if merge_request_id:
            return merge_request_id
        if not self.environ.get("CI_COMMIT_SHA"):
            return "0"
        # TODO: 通过 API 按 CI_COMMIT_SHA 查找 opened MR；目前固定为第一个 MR
        return "1"

    @property
    def repo_slug(self) -> str:
        return self.environ.get("CI_PROJECT_PATH", "")

    @property
    def repo_url(self) -> str:
        return self.environ.get("CI_PROJECT_URL", "")

    def repo_metadata(self) -> RepoMetaData:
        return RepoMetaData(repo_slug=self.repo_slug, pull_request_id=self.pull_request_id)
