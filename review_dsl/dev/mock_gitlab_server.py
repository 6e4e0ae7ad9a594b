"""
本地 Mock GitLab API server（只覆盖组装 git DSL 用到的读接口）。

用途：
- 在没有真实 GitLab 的情况下，本地跑通：
  MR info -> changes（分页）-> commits -> structured diff / raw file
- 单元测试里通过 `httpx.ASGITransport` 直接挂载，不需要起端口

启动：
  python -m review_dsl.dev.mock_gitlab_server
"""

from __future__ import annotations

from dataclasses import dataclass, field

import uvicorn
from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.responses import PlainTextResponse


def _path(value: str) -> dict[str, object]:
    components = value.split("/")
    name = components[-1]
    extension = name.rsplit(".", 1)[1] if "." in name else None
    return {"components": components, "name": name, "extension": extension, "toString": value}


@dataclass
class MockGitLabData:
    """Mock server 的全部数据。`page_size` 控制 changes 分页大小。"""

    pull_request: dict[str, object]
    changes: list[dict[str, object]]
    commits: list[dict[str, object]]
    diffs: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    files: dict[str, str] = field(default_factory=dict)
    activities: list[dict[str, object]] = field(default_factory=list)
    page_size: int = 2


def default_data() -> MockGitLabData:
    repository = {"slug": "service", "name": "service", "project": {"key": "ACME"}}
    return MockGitLabData(
        pull_request={
            "id": 1,
            "version": 3,
            "title": "Add subtraction helper",
            "description": "",
            "state": "OPEN",
            "fromRef": {
                "id": "refs/heads/feature/sub",
                "displayId": "feature/sub",
                "latestCommit": "1111111111111111111111111111111111111111",
                "repository": repository,
            },
            "toRef": {
                "id": "refs/heads/main",
                "displayId": "main",
                "latestCommit": "0000000000000000000000000000000000000000",
                "repository": repository,
            },
            "author": {"user": {"name": "alice"}},
        },
        changes=[
            {"type": "MODIFY", "path": _path("src/example.py")},
            {"type": "ADD", "path": _path("src/sub.py")},
            {"type": "MOVE", "path": _path("docs/usage.md"), "srcPath": _path("README.old.md")},
            {"type": "DELETE", "path": _path("src/legacy.py")},
        ],
        commits=[
            {
                "id": "1111111111111111111111111111111111111111",
                "displayId": "1111111",
                "author": {"name": "alice", "emailAddress": "alice@example.com"},
                "authorTimestamp": 1700000000000,
                "message": "Add subtraction helper",
                "parents": [{"id": "0000000000000000000000000000000000000000", "displayId": "0000000"}],
            }
        ],
        diffs={
            "src/example.py": [
                {
                    "source": _path("src/example.py"),
                    "destination": _path("src/example.py"),
                    "hunks": [
                        {
                            "sourceLine": 1,
                            "sourceSpan": 2,
                            "destinationLine": 1,
                            "destinationSpan": 3,
                            "segments": [
                                {
                                    "type": "CONTEXT",
                                    "lines": [{"line": "def add(a, b):", "source": 1, "destination": 1}],
                                },
                                {
                                    "type": "REMOVED",
                                    "lines": [{"line": "    return a + b", "source": 2, "destination": None}],
                                },
                                {
                                    "type": "ADDED",
                                    "lines": [
                                        {"line": "    # TODO: handle None inputs", "source": None, "destination": 2},
                                        {"line": "    return a + b", "source": None, "destination": 3},
                                    ],
                                },
                            ],
                        }
                    ],
                }
            ],
        },
        files={"src/example.py": "def add(a, b):\n    # TODO: handle None inputs\n    return a + b\n"},
    )


def build_mock_app(data: MockGitLabData) -> FastAPI:
    app = FastAPI(title="Mock GitLab API", version="0.1.0")
    app.state.requests = []

    def _record(path: str) -> None:
        app.state.requests.append(path)

    @app.get("/projects/{repo_slug:path}/merge_requests/{pr_id}/changes")
    async def get_changes(repo_slug: str, pr_id: str, start: int = 0) -> dict[str, object]:
        _record(f"changes?start={start}")
        end = start + data.page_size
        next_page_start = end if end < len(data.changes) else None
        return {
            "values": data.changes[start:end],
            "start": start,
            "size": len(data.changes[start:end]),
            "isLastPage": next_page_start is None,
            "nextPageStart": next_page_start,
        }

    @app.get("/projects/{repo_slug:path}/merge_requests/{pr_id}/commits")
    async def get_commits(repo_slug: str, pr_id: str) -> dict[str, object]:
        _record("commits")
        return {"values": data.commits}

    @app.get("/projects/{repo_slug:path}/merge_requests/{pr_id}/activities")
    async def get_activities(repo_slug: str, pr_id: str, fromType: str = "ACTIVITY") -> dict[str, object]:
        _record(f"activities?fromType={fromType}")
        if fromType == "COMMENT":
            return {"values": [a for a in data.activities if a.get("comment")]}
        return {"values": data.activities}

    @app.get("/projects/{repo_slug:path}/merge_requests/{pr_id}")
    async def get_pull_request(repo_slug: str, pr_id: str) -> dict[str, object]:
        _record("pull_request")
        return data.pull_request

    @app.get("/rest/api/1.0/{repo_slug:path}/compare/diff/{filename:path}")
    async def get_structured_diff(repo_slug: str, filename: str) -> dict[str, object]:
        _record(f"diff:{filename}")
        return {"diffs": data.diffs.get(filename, [])}

    @app.get("/{repo_slug:path}/raw/{file_path:path}")
    async def get_raw_file(repo_slug: str, file_path: str) -> PlainTextResponse:
        _record(f"raw:{file_path}")
        if file_path not in data.files:
            raise HTTPException(status_code=404, detail="File not found")
        return PlainTextResponse(data.files[file_path])

    return app


app = build_mock_app(default_data())


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9002)


if __name__ == "__main__":
    main()
