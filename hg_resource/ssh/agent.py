"""ssh-agent session management: supersede the previous agent, start a new one.

At most one agent is current per environment: before a new agent starts,
the one recorded in ``SSH_AGENT_PID`` is terminated so a stale agent holding
different key material is never reused.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from collections.abc import MutableMapping

from hg_resource.domain.errors import AgentStateError, CredentialError
from hg_resource.domain.models import AGENT_PID_VAR, AGENT_SOCK_VAR, AgentSession
from hg_resource.ssh.environment import EnvironmentMutator, parse_agent_output

logger = logging.getLogger(__name__)

SSH_AGENT_BINARY = "ssh-agent"


def supersede_agent(environ: MutableMapping[str, str]) -> int | None:
    """Terminate the agent recorded in *environ*, if any.

    The recorded pid is only a hint: an agent that is already gone is fine,
    but a pid we may not signal is an error.

    Returns:
        The pid that was signalled or found gone, or None when nothing was
        recorded.

    Raises:
        AgentStateError: if the recorded pid is not an integer.
        CredentialError: if signalling the process fails for any reason
            other than it no longer existing.
    """
    pid_str = environ.get(AGENT_PID_VAR, "")
    if not pid_str:
        return None

    try:
        pid = int(pid_str)
    except ValueError as err:
        raise AgentStateError(
            f"kill ssh-agent: {AGENT_PID_VAR} not an integer, but: {pid_str}"
        ) from err

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        logger.debug("Previous ssh-agent %d already gone", pid)
    except OSError as err:
        raise CredentialError(f"kill ssh-agent {pid}: {err}") from err
    else:
        logger.info("Terminated previous ssh-agent %d", pid)
    return pid


def start_agent(
    environ: MutableMapping[str, str],
    binary: str = SSH_AGENT_BINARY,
) -> AgentSession:
    """Start a fresh ssh-agent and record its variables in *environ*.

    Call :func:`supersede_agent` first; this does not look at the agent
    previously recorded in *environ*.

    Raises:
        CredentialError: if the agent cannot be spawned, exits non-zero, or
            announces no usable pid/socket.
    """
    logger.debug("%s -s", binary)
    try:
        result = subprocess.run(
            [binary, "-s"],
            env=dict(environ),
            capture_output=True,
            text=True,
        )
    except OSError as err:
        raise CredentialError(f"ssh-agent: {err}") from err

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exited with status {result.returncode}"
        raise CredentialError(f"ssh-agent: {detail}")

    pairs = parse_agent_output(result.stdout)
    EnvironmentMutator(environ).apply(pairs)

    return _session_from(pairs)


def _session_from(pairs: dict[str, str]) -> AgentSession:
    for var in (AGENT_PID_VAR, AGENT_SOCK_VAR):
        if not pairs.get(var):
            raise CredentialError(f"ssh-agent: announcement did not set {var}")
    try:
        pid = int(pairs[AGENT_PID_VAR])
    except ValueError as err:
        raise CredentialError(
            f"ssh-agent: announced {AGENT_PID_VAR} is not an integer: {pairs[AGENT_PID_VAR]}"
        ) from err

    logger.info("Started ssh-agent %d", pid)
    return AgentSession(pid=pid, auth_sock=pairs[AGENT_SOCK_VAR], variables=dict(pairs))
