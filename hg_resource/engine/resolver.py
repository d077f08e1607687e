"""Version resolver: decide which versions a check reports.

With no prior version the newest commit is reported on its own. With a
prior version, that commit and all of its descendants are reported oldest
first; consumers replay the list in order, so it is never re-sorted here.
"""

from __future__ import annotations

import logging

from hg_resource.domain.errors import RefNotFoundError
from hg_resource.domain.interfaces import RepositoryClient
from hg_resource.domain.models import Version

logger = logging.getLogger(__name__)


def resolve_versions(repo: RepositoryClient, prior_ref: str | None = None) -> list[Version]:
    """Return the versions to report for a check.

    Args:
        repo: A synchronised repository client.
        prior_ref: The last reported ref, or None/"" on the first check.

    Returns:
        A single-element list with the latest commit when there is no
        prior ref or it is unknown to the repository (e.g. history was
        rewritten upstream); otherwise *prior_ref* and its descendants,
        ascending.

    Raises:
        EmptyRepositoryError: if no latest commit exists.
        RepositoryError: if the descendant query fails for any reason other
            than the ref being unknown.
    """
    if not prior_ref:
        return latest_version(repo)

    try:
        commits = repo.get_descendants_of(prior_ref)
    except RefNotFoundError as err:
        logger.warning("Ref %s not found (%s); reporting latest commit instead", prior_ref, err)
        return latest_version(repo)

    return [Version(ref=commit) for commit in commits]


def latest_version(repo: RepositoryClient) -> list[Version]:
    return [Version(ref=repo.get_latest_commit_id())]
