"""Check response writing: an ordered JSON array of ``{"ref": ...}`` objects."""

from __future__ import annotations

import json
from typing import IO

from hg_resource.domain.models import Version


def write_versions(stream: IO[str], versions: list[Version]) -> None:
    json.dump([v.to_dict() for v in versions], stream)
    stream.write("\n")
