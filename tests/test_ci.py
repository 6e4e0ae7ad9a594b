from __future__ import annotations

from review_dsl.ci import GitLabCI


def test_not_ci_without_gitlab_ci() -> None:
    ci = GitLabCI(environ={})
    assert not ci.is_ci
    assert not ci.is_pr
    assert ci.pull_request_id == "0"


def test_merge_request_pipeline() -> None:
    ci = GitLabCI(
        environ={
            "GITLAB_CI": "true",
            "CI_PROJECT_PATH": "acme/service",
            "CI_PROJECT_URL": "https://gitlab.example.com/acme/service",
            "CI_MERGE_REQUEST_ID": "42",
        }
    )
    assert ci.is_ci
    assert ci.is_pr
    assert ci.repo_url == "https://gitlab.example.com/acme/service"
    metadata = ci.repo_metadata()
    assert metadata.repo_slug == "acme/service"
    assert metadata.pull_request_id == "42"


def test_branch_pipeline_without_commit_sha_is_not_pr() -> None:
    ci = GitLabCI(environ={"GITLAB_CI": "true", "CI_PROJECT_PATH": "acme/service"})
    assert ci.is_ci
    assert not ci.is_pr
