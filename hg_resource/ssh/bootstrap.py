"""SSH bootstrapper: turn a private key into a usable ssh-agent session.

Stages, each aborting the rest on failure:

1. validate the key (passphrase-protected keys are rejected);
2. supersede the agent recorded in the environment;
3. start a fresh agent and record its variables;
4. load the key into it;
5. write the client trust config under the home directory.

No stage is retried. The agent is left running on success so that later
``hg`` processes given the same environment can use it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from enum import Enum
from pathlib import Path

from hg_resource.domain.errors import CredentialError
from hg_resource.domain.models import AgentSession
from hg_resource.ssh.agent import SSH_AGENT_BINARY, start_agent, supersede_agent
from hg_resource.ssh.keys import SSH_ADD_BINARY, add_private_key, validate_private_key
from hg_resource.ssh.trust import write_client_config

logger = logging.getLogger(__name__)


class BootstrapStage(Enum):
    """How far the last bootstrap got."""

    IDLE = "idle"
    KEY_VALIDATED = "key_validated"
    AGENT_SUPERSEDED = "agent_superseded"
    AGENT_STARTED = "agent_started"
    KEY_LOADED = "key_loaded"
    TRUST_CONFIG_WRITTEN = "trust_config_written"


class SSHBootstrapper:
    """Provision SSH credentials into an explicit environment mapping.

    Args:
        environ: Environment the agent variables are recorded in and child
            processes are spawned with. Defaults to a copy of ``os.environ``.
        home_dir: Where ``.ssh/config`` goes. Defaults to ``$HOME`` from
            *environ*, then :meth:`pathlib.Path.home`.
        ssh_agent_binary: Agent executable.
        ssh_add_binary: Key-registration executable.
    """

    def __init__(
        self,
        environ: MutableMapping[str, str] | None = None,
        home_dir: Path | None = None,
        ssh_agent_binary: str = SSH_AGENT_BINARY,
        ssh_add_binary: str = SSH_ADD_BINARY,
    ) -> None:
        self.environ = environ if environ is not None else dict(os.environ)
        self._home_dir = home_dir
        self._ssh_agent_binary = ssh_agent_binary
        self._ssh_add_binary = ssh_add_binary
        self.stage = BootstrapStage.IDLE
        self.session: AgentSession | None = None

    @property
    def home_dir(self) -> Path:
        if self._home_dir is not None:
            return self._home_dir
        home = self.environ.get("HOME")
        if home:
            return Path(home)
        try:
            return Path.home()
        except RuntimeError as err:
            raise CredentialError(f"could not determine home directory: {err}") from err

    def bootstrap(self, private_key_pem: str) -> AgentSession:
        """Run every stage for *private_key_pem* and return the new session.

        Raises:
            UnsupportedKeyError: for passphrase-protected keys, before any
                process is spawned.
            CredentialError: for any other stage failure.
        """
        self.stage = BootstrapStage.IDLE
        self.session = None

        validate_private_key(private_key_pem)
        self.stage = BootstrapStage.KEY_VALIDATED

        supersede_agent(self.environ)
        self.stage = BootstrapStage.AGENT_SUPERSEDED

        session = start_agent(self.environ, binary=self._ssh_agent_binary)
        self.stage = BootstrapStage.AGENT_STARTED

        add_private_key(private_key_pem, self.environ, binary=self._ssh_add_binary)
        self.stage = BootstrapStage.KEY_LOADED

        write_client_config(self.home_dir)
        self.stage = BootstrapStage.TRUST_CONFIG_WRITTEN

        self.session = session
        logger.info("SSH credentials ready (agent %d)", session.pid)
        return session
