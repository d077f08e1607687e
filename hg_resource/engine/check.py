"""Check service: provision credentials, sync the clone, resolve versions.

This is the entry point of the check step. Credentials and the repository
client share one explicit environment mapping, so the hg child processes
see exactly the agent this run started.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping

from hg_resource.adapters.mercurial import HgRepository
from hg_resource.config.settings import Settings
from hg_resource.domain.models import CheckRequest, Version
from hg_resource.engine.resolver import resolve_versions
from hg_resource.security.redaction import redact_uri
from hg_resource.ssh.bootstrap import SSHBootstrapper

logger = logging.getLogger(__name__)


def run_check(
    request: CheckRequest,
    settings: Settings | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> list[Version]:
    """Run one check and return the versions to report.

    Args:
        request: The parsed check request.
        settings: Binaries and cache location. Defaults apply when None.
        environ: Environment for every child process. Mutated with the
            agent variables when the source carries a private key.
            Defaults to a copy of ``os.environ``.

    Returns:
        Versions in ascending order.
    """
    settings = settings or Settings()
    environ = environ if environ is not None else dict(os.environ)
    source = request.source

    if source.private_key:
        bootstrapper = SSHBootstrapper(
            environ,
            ssh_agent_binary=settings.ssh_agent_binary,
            ssh_add_binary=settings.ssh_add_binary,
        )
        bootstrapper.bootstrap(source.private_key)

    repo = HgRepository(
        path=settings.cache_dir,
        branch=source.branch,
        include_paths=source.include_paths,
        exclude_paths=source.exclude_paths,
        tag_filter=source.tag_filter,
        env=environ,
        binary=settings.hg_binary,
    )
    logger.info("Checking %s (branch %s)", redact_uri(source.uri), repo.branch)
    repo.clone_or_pull(source.uri, source.skip_ssl_verification)

    return resolve_versions(repo, request.prior_ref)
