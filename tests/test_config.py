from __future__ import annotations

import httpx
import pytest
from pydantic import ValidationError

from review_dsl.config import DEFAULT_DIFF_CONCURRENCY
from review_dsl.config import DEFAULT_REQUEST_TIMEOUT
from review_dsl.config import build_http_client
from review_dsl.config import load_config_from_env
from review_dsl.errors import MissingCredentialError


def test_load_config_requires_host() -> None:
    with pytest.raises(MissingCredentialError) as exc_info:
        load_config_from_env(environ={"GITLAB_TOKEN": "t"})
    assert exc_info.value.missing == ["GITLAB_HOST"]


def test_load_config_rejects_empty_host() -> None:
    with pytest.raises(MissingCredentialError):
        load_config_from_env(environ={"GITLAB_HOST": ""})


def test_load_config_defaults() -> None:
    cfg = load_config_from_env(environ={"GITLAB_HOST": "https://gitlab.example.com"})
    assert cfg.gitlab.base_url == "https://gitlab.example.com"
    assert cfg.gitlab.auth_header() == {}
    assert cfg.request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert cfg.diff_concurrency == DEFAULT_DIFF_CONCURRENCY
    assert cfg.proxy_url is None


def test_load_config_reads_optional_values() -> None:
    environ = {
        "GITLAB_HOST": "https://gitlab.example.com",
        "GITLAB_TOKEN": "t",
        "GITLAB_REQUEST_TIMEOUT": "12.5",
        "GITLAB_DIFF_CONCURRENCY": "8",
        "https_proxy": "http://proxy.local:3128",
    }
    cfg = load_config_from_env(environ=environ)
    assert cfg.gitlab.auth_header() == {"Authorization": "Bearer t"}
    assert cfg.request_timeout == 12.5
    assert cfg.diff_concurrency == 8
    assert cfg.proxy_url == "http://proxy.local:3128"


def test_load_config_rejects_invalid_timeout() -> None:
    with pytest.raises(ValidationError):
        load_config_from_env(environ={"GITLAB_HOST": "https://gitlab.example.com", "GITLAB_REQUEST_TIMEOUT": "0"})


def test_load_config_rejects_invalid_host() -> None:
    with pytest.raises(ValidationError):
        load_config_from_env(environ={"GITLAB_HOST": "not a url"})


def test_build_http_client_applies_timeout() -> None:
    cfg = load_config_from_env(environ={"GITLAB_HOST": "https://gitlab.example.com", "GITLAB_REQUEST_TIMEOUT": "5"})
    client = build_http_client(cfg)
    assert isinstance(client, httpx.AsyncClient)
    assert client.timeout == httpx.Timeout(5.0)
