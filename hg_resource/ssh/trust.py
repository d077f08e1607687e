"""SSH client configuration for ephemeral CI containers.

Host keys of the remote are unknown inside a fresh container, so host-key
verification is disabled and ssh is told to keep quiet.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from hg_resource.domain.errors import CredentialError

logger = logging.getLogger(__name__)

SSH_CLIENT_CONFIG = "StrictHostKeyChecking no\nLogLevel quiet\n"
SSH_CLIENT_CONFIG_RELATIVE = Path(".ssh") / "config"


def ensure_ssh_dir(config_path: Path) -> Path:
    """Create the directory holding *config_path* with mode 0700 if absent.

    An existing directory is left exactly as it is; permissions are only
    set at creation time.

    Returns the directory path.
    """
    ssh_dir = config_path.parent
    if ssh_dir.exists():
        return ssh_dir

    try:
        ssh_dir.mkdir(parents=True, mode=0o700)
        # mkdir's mode is filtered through the umask
        os.chmod(ssh_dir, 0o700)
    except OSError as err:
        raise CredentialError(f"could not create .ssh dir: {err}") from err

    logger.debug("Created %s", ssh_dir)
    return ssh_dir


def write_client_config(home_dir: Path) -> Path:
    """Write the relaxed client config to ``<home_dir>/.ssh/config``.

    The file is always overwritten and left readable by the owner only.

    Returns the path of the written file.
    """
    config_path = home_dir / SSH_CLIENT_CONFIG_RELATIVE
    ensure_ssh_dir(config_path)

    try:
        fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(SSH_CLIENT_CONFIG)
        os.chmod(config_path, 0o600)
    except OSError as err:
        raise CredentialError(f"write {config_path}: {err}") from err

    logger.info("Wrote ssh client config to %s", config_path)
    return config_path
