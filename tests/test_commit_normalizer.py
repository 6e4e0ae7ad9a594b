from __future__ import annotations

from review_dsl.gitlab.adapter import epoch_millis_to_iso
from review_dsl.gitlab.adapter import normalize_commit
from review_dsl.gitlab.schemas import PlatformCommit
from review_dsl.gitlab.schemas import RepoMetaData

REPO = RepoMetaData(repo_slug="acme/service", pull_request_id="7")


def _commit(**overrides: object) -> PlatformCommit:
    payload: dict[str, object] = {
        "id": "abc123",
        "author": {"name": "alice", "emailAddress": "alice@example.com"},
        "authorTimestamp": 1700000000000,
        "message": "Fix bug",
        "parents": [{"id": "p1"}, {"id": "p2"}],
    }
    payload.update(overrides)
    return PlatformCommit.model_validate(payload)


def test_missing_committer_falls_back_to_author() -> None:
    commit = normalize_commit(_commit(), REPO, "https://gitlab.example.com")
    assert commit.committer == commit.author
    assert commit.author.date == "2023-11-14T22:13:20.000Z"
    assert commit.author.email == "alice@example.com"


def test_committer_is_used_when_present() -> None:
    record = _commit(
        committer={"name": "bob", "emailAddress": "bob@example.com"},
        committerTimestamp=1700000000123,
    )
    commit = normalize_commit(record, REPO, "https://gitlab.example.com")
    assert commit.committer.name == "bob"
    assert commit.committer.date == "2023-11-14T22:13:20.123Z"
    assert commit.author.name == "alice"


def test_url_parents_and_tree() -> None:
    commit = normalize_commit(_commit(), REPO, "https://gitlab.example.com/")
    assert commit.url == "https://gitlab.example.com/acme/service/commits/abc123"
    assert commit.sha == "abc123"
    assert commit.parents == ("p1", "p2")
    assert commit.tree is None
    assert commit.message == "Fix bug"


def test_epoch_millis_to_iso() -> None:
    assert epoch_millis_to_iso(0) == "1970-01-01T00:00:00.000Z"
    assert epoch_millis_to_iso(1700000000999) == "2023-11-14T22:13:20.999Z"


def test_commit_normalization_is_repeatable() -> None:
    record = _commit()
    assert normalize_commit(record, REPO, "https://h") == normalize_commit(record, REPO, "https://h")
