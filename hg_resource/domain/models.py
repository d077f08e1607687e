"""Core domain models for the Mercurial check resource.

These models have ZERO dependencies on subprocesses, the CLI, or any
framework. They use the resource vocabulary: Source, Version, AgentSession.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BRANCH = "default"
"""Mercurial's trunk branch name, used when the source names none."""

AGENT_PID_VAR = "SSH_AGENT_PID"
AGENT_SOCK_VAR = "SSH_AUTH_SOCK"


@dataclass(frozen=True)
class Source:
    """Where the repository lives and which commits are interesting.

    Built once from the incoming request and read-only afterwards.
    """

    uri: str
    branch: str = DEFAULT_BRANCH
    include_paths: tuple[str, ...] = ()
    exclude_paths: tuple[str, ...] = ()
    tag_filter: str | None = None
    """Regex; when set only tagged commits matching it are reported."""

    skip_ssl_verification: bool = False
    private_key: str | None = field(default=None, repr=False)
    """PEM-encoded key material. Never shown in reprs."""


@dataclass(frozen=True)
class Version:
    """One commit in the repository's history, identified by its node id."""

    ref: str

    def to_dict(self) -> dict[str, str]:
        return {"ref": self.ref}


@dataclass(frozen=True)
class CheckRequest:
    """A parsed check request: the source plus the last version seen, if any."""

    source: Source
    version: Version | None = None

    @property
    def prior_ref(self) -> str | None:
        if self.version is None or not self.version.ref:
            return None
        return self.version.ref


@dataclass(frozen=True)
class AgentSession:
    """A running ssh-agent, as announced on its standard output.

    The pid is whatever the agent printed; it is a hint for later
    supersession, not an owned process handle.
    """

    pid: int
    auth_sock: str
    variables: dict[str, str] = field(default_factory=dict)
    """Every KEY=VALUE pair parsed from the announcement, in order."""

    def as_env(self) -> dict[str, str]:
        """Return the variables a child process needs to reach this agent."""
        return {AGENT_PID_VAR: str(self.pid), AGENT_SOCK_VAR: self.auth_sock}
