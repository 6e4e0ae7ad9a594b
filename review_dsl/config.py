"""
应用配置加载。

设计目标：
- **严格**：缺少 GitLab host 就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/数值，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试
"""

from __future__ import annotations

import base64
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from review_dsl.errors import MissingCredentialError

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_DIFF_CONCURRENCY = 4


class RepoCredentials(BaseModel):
    """GitLab 实例地址 + 凭证。token 优先于 username/password。"""

    model_config = ConfigDict(frozen=True)

    host: HttpUrl
    username: str | None = None
    password: str | None = None
    token: str | None = None

    @property
    def base_url(self) -> str:
        """不带末尾 / 的 host，用于拼接 API path。"""
        return str(self.host).rstrip("/")

    def auth_header(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        if self.password:
            raw = f"{self.username}:{self.password}".encode("utf-8")
            return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
        return {}


class AppConfig(BaseModel):
    """一次 review run 需要的配置集合。"""

    model_config = ConfigDict(frozen=True)

    gitlab: RepoCredentials
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    diff_concurrency: int = Field(default=DEFAULT_DIFF_CONCURRENCY, ge=1)
    proxy_url: str | None = None


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：`GITLAB_HOST` 缺失/为空抛 `MissingCredentialError`；数值非法抛 `ValidationError`
    """
    required_keys: tuple[str, ...] = ("GITLAB_HOST",)
    missing: list[str] = [key for key in required_keys if not environ.get(key)]
    if missing:
        raise MissingCredentialError(missing)

    credentials = RepoCredentials(
        host=environ["GITLAB_HOST"],
        username=environ.get("GITLAB_USERNAME") or None,
        password=environ.get("GITLAB_PASSWORD") or None,
        token=environ.get("GITLAB_TOKEN") or None,
    )
    return AppConfig(
        gitlab=credentials,
        request_timeout=environ.get("GITLAB_REQUEST_TIMEOUT") or DEFAULT_REQUEST_TIMEOUT,
        diff_concurrency=environ.get("GITLAB_DIFF_CONCURRENCY") or DEFAULT_DIFF_CONCURRENCY,
        proxy_url=_proxy_from_env(environ),
    )


def _proxy_from_env(environ: Mapping[str, str]) -> str | None:
    # 与 curl 一致：小写优先
    for key in ("https_proxy", "HTTPS_PROXY", "http_proxy", "HTTP_PROXY"):
        value = environ.get(key)
        if value:
            return value
    return None


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """创建可复用的 `httpx.AsyncClient`（per-request timeout + 可选代理）。"""
    return httpx.AsyncClient(timeout=httpx.Timeout(config.request_timeout), proxy=config.proxy_url)
