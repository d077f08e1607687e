"""Tests for the version resolver."""

from __future__ import annotations

import pytest

from hg_resource.domain.errors import EmptyRepositoryError, RefNotFoundError, RepositoryError
from hg_resource.domain.models import Version
from hg_resource.engine.resolver import resolve_versions


class FakeRepository:
    """In-memory linear history; descendants follow list order."""

    def __init__(self, commits: list[str], descendants_error: Exception | None = None) -> None:
        self.commits = commits
        self.descendants_error = descendants_error
        self.latest_calls = 0

    def clone_or_pull(self, uri: str, skip_ssl_verification: bool = False) -> None:
        pass

    def get_latest_commit_id(self) -> str:
        self.latest_calls += 1
        if not self.commits:
            raise EmptyRepositoryError("empty")
        return self.commits[-1]

    def get_descendants_of(self, ref: str) -> list[str]:
        if self.descendants_error is not None:
            raise self.descendants_error
        if ref not in self.commits:
            raise RefNotFoundError(f"unknown revision {ref}")
        return self.commits[self.commits.index(ref):]


@pytest.fixture()
def repo() -> FakeRepository:
    return FakeRepository(["a1", "b2", "c3", "d4"])


class TestNoPriorRef:
    def test_returns_latest_only(self, repo: FakeRepository) -> None:
        assert resolve_versions(repo) == [Version("d4")]

    def test_empty_string_counts_as_absent(self, repo: FakeRepository) -> None:
        assert resolve_versions(repo, "") == [Version("d4")]

    def test_empty_repository_propagates(self) -> None:
        with pytest.raises(EmptyRepositoryError):
            resolve_versions(FakeRepository([]))


class TestWithPriorRef:
    def test_returns_descendants_ascending_including_ref(self, repo: FakeRepository) -> None:
        assert resolve_versions(repo, "b2") == [Version("b2"), Version("c3"), Version("d4")]

    def test_latest_ref_returns_itself(self, repo: FakeRepository) -> None:
        assert resolve_versions(repo, "d4") == [Version("d4")]

    def test_order_is_not_changed(self) -> None:
        # whatever order the client reports is what gets emitted
        repo = FakeRepository(["zz", "aa", "mm"])
        assert [v.ref for v in resolve_versions(repo, "zz")] == ["zz", "aa", "mm"]

    def test_latest_not_queried_on_success(self, repo: FakeRepository) -> None:
        resolve_versions(repo, "a1")
        assert repo.latest_calls == 0


class TestUnknownRef:
    def test_falls_back_to_latest(self, repo: FakeRepository) -> None:
        assert resolve_versions(repo, "rewritten") == resolve_versions(repo)

    def test_fallback_is_single_element(self, repo: FakeRepository) -> None:
        assert resolve_versions(repo, "rewritten") == [Version("d4")]

    def test_fallback_on_empty_repository_propagates(self) -> None:
        with pytest.raises(EmptyRepositoryError):
            resolve_versions(FakeRepository([]), "gone")

    def test_other_repository_errors_propagate(self, repo: FakeRepository) -> None:
        repo.descendants_error = RepositoryError("hg log failed (rc=255): abort: no suitable response")
        with pytest.raises(RepositoryError, match="no suitable response"):
            resolve_versions(repo, "b2")
