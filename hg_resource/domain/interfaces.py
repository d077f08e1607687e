"""Domain collaborator interfaces.

These are pure protocols; no subprocess details leak into the domain.
"""

from __future__ import annotations

from typing import Protocol


class RepositoryClient(Protocol):
    """Synchronise a local copy of a repository and query its history."""

    def clone_or_pull(self, uri: str, skip_ssl_verification: bool = False) -> None:
        """Clone *uri* into the local cache, or pull into an existing clone.

        Raises RepositoryError on network or authentication failure.
        """
        ...

    def get_latest_commit_id(self) -> str:
        """Return the newest matching commit. Raises EmptyRepositoryError."""
        ...

    def get_descendants_of(self, ref: str) -> list[str]:
        """Return *ref* and its matching descendants, oldest first.

        Raises RefNotFoundError when *ref* is unknown to the repository.
        """
        ...
