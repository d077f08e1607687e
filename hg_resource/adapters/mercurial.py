"""HgRepository: keep a local clone in sync and query its history.

All hg operations use :func:`subprocess.run`; Mercurial is never imported.
Output is requested with ``HGPLAIN=1`` so user configuration cannot change
its format.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from hg_resource.domain.errors import EmptyRepositoryError, RefNotFoundError, RepositoryError
from hg_resource.domain.models import DEFAULT_BRANCH
from hg_resource.security.redaction import redact_text

logger = logging.getLogger(__name__)

HG_BINARY = "hg"

# hg aborts with these when a revision identifier does not resolve
_UNKNOWN_REF_MARKERS = ("unknown revision", "filtered revision", "hidden revision")


def quote_revset(value: str) -> str:
    """Quote *value* as a revset string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _run_hg(
    *args: str,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    binary: str = HG_BINARY,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute an hg command and return the result.

    Parameters
    ----------
    *args:
        Arguments passed after ``hg``.
    cwd:
        Working directory for the command.
    env:
        Complete child environment. ``HGPLAIN`` is always added.
    check:
        If *True*, raise :class:`RepositoryError` on non-zero exit.
    """
    child_env = dict(env if env is not None else os.environ)
    child_env["HGPLAIN"] = "1"

    logger.debug("hg %s (cwd=%s)", redact_text(" ".join(args)), cwd)
    try:
        result = subprocess.run(
            [binary, *args],
            cwd=cwd,
            env=child_env,
            capture_output=True,
            text=True,
        )
    except OSError as err:
        raise RepositoryError(f"{binary}: {err}") from err

    if check and result.returncode != 0:
        raise RepositoryError(
            f"hg {args[0]} failed (rc={result.returncode}): "
            f"{redact_text(result.stderr.strip())}"
        )
    return result


class HgRepository:
    """A cached clone of one remote repository, filtered by branch, paths and tags.

    Parameters
    ----------
    path:
        Directory of the local clone. Created on first clone.
    branch:
        Only commits on this named branch are considered.
    include_paths, exclude_paths:
        hg file patterns; only commits touching included (and not only
        excluded) files are considered.
    tag_filter:
        Regex; when set only commits carrying a matching tag are considered.
    env:
        Complete environment for hg child processes, carrying any ssh-agent
        variables. Defaults to ``os.environ``.
    """

    def __init__(
        self,
        path: str | Path,
        branch: str = DEFAULT_BRANCH,
        include_paths: Sequence[str] = (),
        exclude_paths: Sequence[str] = (),
        tag_filter: str | None = None,
        env: Mapping[str, str] | None = None,
        binary: str = HG_BINARY,
    ) -> None:
        self.path = Path(path)
        self.branch = branch or DEFAULT_BRANCH
        self.include_paths = tuple(include_paths)
        self.exclude_paths = tuple(exclude_paths)
        self.tag_filter = tag_filter
        self.env = dict(env) if env is not None else None
        self.binary = binary

    def _hg(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        return _run_hg(*args, cwd=self.path, env=self.env, binary=self.binary, check=check)

    # -- Synchronisation ------------------------------------------------------

    def is_clone(self) -> bool:
        return (self.path / ".hg").is_dir()

    def clone_or_pull(self, uri: str, skip_ssl_verification: bool = False) -> None:
        """Clone *uri* into :attr:`path`, or pull into the existing clone."""
        extra = ["--insecure"] if skip_ssl_verification else []

        if self.is_clone():
            self._hg("pull", "--quiet", *extra, uri)
            logger.info("Pulled %s into %s", redact_text(uri), self.path)
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise RepositoryError(f"could not create cache dir {self.path.parent}: {err}") from err
        _run_hg(
            "clone", "--quiet", "--noupdate", *extra, uri, str(self.path),
            env=self.env,
            binary=self.binary,
        )
        logger.info("Cloned %s -> %s", redact_text(uri), self.path)

    # -- Queries --------------------------------------------------------------

    def revset(self) -> str:
        """Return the revset selecting every commit this repository considers."""
        expr = f"branch({quote_revset(self.branch)})"
        if self.tag_filter:
            expr += f" and tag({quote_revset('re:' + self.tag_filter)})"
        return expr

    def _path_args(self) -> list[str]:
        args: list[str] = []
        for pattern in self.include_paths:
            args += ["--include", pattern]
        for pattern in self.exclude_paths:
            args += ["--exclude", pattern]
        return args

    def _log(
        self, revset: str, template: str, check: bool = True, limit: int | None = None
    ) -> subprocess.CompletedProcess[str]:
        extra = ["--limit", str(limit)] if limit is not None else []
        return self._hg(
            "log", "--rev", revset, "--template", template, *extra, *self._path_args(),
            check=check,
        )

    def get_latest_commit_id(self) -> str:
        """Return the node id of the newest matching commit.

        hg applies the path filters before ``--limit``, so only one matching
        node is printed however long the history is.
        """
        result = self._log(f"sort({self.revset()}, -rev)", "{node}\n", limit=1)
        nodes = result.stdout.split()
        if not nodes:
            raise EmptyRepositoryError(
                f"no commits on branch '{self.branch}' match the source filters"
            )
        return nodes[0]

    def get_descendants_of(self, ref: str) -> list[str]:
        """Return *ref* and its matching descendants, oldest first.

        *ref* itself is only included while it still matches the branch, tag
        and path filters. A ref recorded before the filters changed can
        therefore be missing from the head of the list; its matching
        descendants are still reported.
        """
        revset = f"sort({quote_revset(ref)}:: and ({self.revset()}), rev)"
        result = self._log(revset, "{node}\n", check=False)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if any(marker in stderr for marker in _UNKNOWN_REF_MARKERS):
                raise RefNotFoundError(f"unknown revision {ref}")
            raise RepositoryError(
                f"hg log failed (rc={result.returncode}): {redact_text(stderr)}"
            )

        nodes = result.stdout.split()
        if not nodes:
            raise RefNotFoundError(f"revision {ref} has no matching descendants")
        return nodes
