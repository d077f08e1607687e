"""Error taxonomy for the check resource.

Every failure the resource reports is an ``HgResourceError``; the CLI turns
it into a diagnostic line and exit status 1.
"""

from __future__ import annotations


class HgResourceError(Exception):
    """Base class for all resource failures."""


class InputError(HgResourceError):
    """The request on stdin is malformed or lacks a mandatory field."""


class ConfigError(HgResourceError):
    """The settings file is unreadable or structurally invalid."""


class CredentialError(HgResourceError):
    """SSH credentials could not be provisioned."""


class UnsupportedKeyError(CredentialError):
    """The private key is passphrase-protected."""

    def __init__(self, message: str = "Private keys with passphrases are not supported.") -> None:
        super().__init__(message)


class AgentStateError(CredentialError):
    """The recorded agent pid is not an integer."""


class RepositoryError(HgResourceError):
    """An ``hg`` invocation failed (network, auth, or repository state)."""


class EmptyRepositoryError(RepositoryError):
    """The repository has no commit matching the source's filters."""


class RefNotFoundError(RepositoryError):
    """The previously reported ref is unknown to the repository."""
