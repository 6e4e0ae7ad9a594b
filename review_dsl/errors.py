"""
错误类型（统一在这里定义，便于上游按类型处理/告警）。

约定：
- 归一化函数遇到非法输入直接抛错，不返回部分结果
- 网络错误不重试，直接向上传播到顶层 run
"""

from __future__ import annotations

CREDENTIAL_HINT = "Have you set GITLAB_USERNAME and GITLAB_PASSWORD or GITLAB_TOKEN?"


class HTTPError(RuntimeError):
    """平台返回非 2xx 响应。4xx 会附带凭证配置提示。"""

    def __init__(self, status: int, reason: str, url: str) -> None:
        self.status = status
        self.reason = reason
        self.url = url
        message = f"{status} - {reason}"
        if 400 <= status < 500:
            message += f" ({CREDENTIAL_HINT})"
        super().__init__(message)


class UnhandledChangeTypeError(ValueError):
    """change record 的 type 不在 ADD/MODIFY/MOVE/DELETE 之内。"""

    def __init__(self, change_type: str) -> None:
        self.change_type = change_type
        super().__init__(f"Unhandled change type: {change_type!r}")


class UnknownSegmentTypeError(ValueError):
    """diff segment 的 type 不在 ADDED/CONTEXT/REMOVED 之内。"""

    def __init__(self, segment_type: str) -> None:
        self.segment_type = segment_type
        super().__init__(f"Unknown segment type: {segment_type!r}")


class MissingCredentialError(ValueError):
    """启动时缺少必要的 host/凭证环境变量。"""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required env vars: {', '.join(missing)}")
