"""Agent announcement parsing and environment mutation.

``ssh-agent -s`` announces itself on stdout with Bourne-shell lines::

    SSH_AUTH_SOCK=/tmp/ssh-XXXXXX/agent.41; export SSH_AUTH_SOCK;
    SSH_AGENT_PID=42; export SSH_AGENT_PID;
    echo Agent pid 42;

Grammar, one line at a time:

- everything from the first ``;`` onwards is discarded;
- the remaining prefix is split on its first ``=`` into KEY and VALUE;
- a prefix without ``=`` (or with an empty KEY) contributes nothing.

No quoting or escaping is understood; VALUE is taken verbatim.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping

logger = logging.getLogger(__name__)


def parse_agent_output(text: str) -> dict[str, str]:
    """Parse agent announcement text into KEY -> VALUE pairs.

    Args:
        text: The agent's captured standard output.

    Returns:
        Parsed pairs in announcement order. A key announced twice keeps its
        last value.
    """
    pairs: dict[str, str] = {}
    for line in text.splitlines():
        prefix = line.split(";", 1)[0]
        key, sep, value = prefix.partition("=")
        if not sep or not key:
            continue
        pairs[key] = value
    return pairs


class EnvironmentMutator:
    """Apply key/value pairs to an environment mapping.

    The target is an explicit mapping, usually a private copy of
    ``os.environ`` that is later handed to child processes.
    """

    def __init__(self, target: MutableMapping[str, str]) -> None:
        self._target = target

    @property
    def target(self) -> MutableMapping[str, str]:
        return self._target

    def apply(self, pairs: dict[str, str] | Iterable[tuple[str, str]]) -> None:
        items = pairs.items() if isinstance(pairs, dict) else pairs
        for key, value in items:
            logger.debug("Setting %s", key)
            self._target[key] = value

    def get(self, key: str) -> str | None:
        return self._target.get(key)
