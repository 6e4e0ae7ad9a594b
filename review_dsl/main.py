"""
命令行入口：在 GitLab CI 里跑一次，输出 MR 的 `GitJSONDSL`（JSON）。

这里做三件事：
- 加载配置（严格校验环境变量）
- 读取 CI 环境，判断是否在 MR 上
- 组装外部依赖（HTTP Client / GitLabAPI）并输出 DSL

启动：
  python -m review_dsl.main
"""

from __future__ import annotations

import logging
import os
import sys

import anyio

from review_dsl.ci import GitLabCI
from review_dsl.config import build_http_client
from review_dsl.config import load_config_from_env
from review_dsl.git.dsl import build_git_dsl
from review_dsl.gitlab.client import GitLabAPI

logger = logging.getLogger(__name__)


async def run() -> int:
    # 配置缺失直接抛错，进程失败（这是期望行为）
    config = load_config_from_env(os.environ)
    ci = GitLabCI(environ=os.environ)
    if not ci.is_pr:
        logger.info(f"{ci.name}: not running on a merge request, skipping")
        return 0

    async with build_http_client(config) as http_client:
        api = GitLabAPI(repo_metadata=ci.repo_metadata(), credentials=config.gitlab, http_client=http_client)
        git = await build_git_dsl(api, diff_concurrency=config.diff_concurrency)

    sys.stdout.write(git.json.model_dump_json(by_alias=True, indent=2) + "\n")
    return 0


def main() -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    sys.exit(anyio.run(run))


if __name__ == "__main__":
    main()
