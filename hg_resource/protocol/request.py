"""Check request parsing.

The request arrives as one JSON document on stdin. The schema mirrors the
domain models:

  source:
    uri: string (required)
    branch: string (optional, defaults to "default")
    private_key: string (optional, PEM)
    include_paths: [string] (optional)
    exclude_paths: [string] (optional)
    tag_filter: string (optional, regex)
    skip_ssl_verification: bool (optional, defaults to false)
  version:
    ref: string (optional)
"""

from __future__ import annotations

import json
from typing import IO, Any

from hg_resource.domain.errors import InputError
from hg_resource.domain.models import DEFAULT_BRANCH, CheckRequest, Source, Version


def read_check_request(stream: IO[str], default_branch: str = DEFAULT_BRANCH) -> CheckRequest:
    """Read and parse a check request from *stream*.

    Raises:
        InputError: if the payload is not valid JSON or fails validation.
    """
    try:
        data = json.load(stream)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise InputError(f"Error parsing input: {err}") from err
    return parse_check_request(data, default_branch=default_branch)


def parse_check_request(data: Any, default_branch: str = DEFAULT_BRANCH) -> CheckRequest:
    if not isinstance(data, dict):
        raise InputError("Error parsing input: request must be a JSON object")

    source_data = data.get("source")
    if not isinstance(source_data, dict):
        raise InputError("Error parsing input: 'source' must be an object")

    version_data = data.get("version")
    version = _parse_version(version_data) if version_data is not None else None

    return CheckRequest(source=_parse_source(source_data, default_branch), version=version)


def _parse_source(data: dict[str, Any], default_branch: str) -> Source:
    uri = _optional_str(data, "uri")
    if not uri:
        raise InputError("Repository URI must be provided")

    skip_ssl = data.get("skip_ssl_verification", False)
    if skip_ssl is None:
        skip_ssl = False
    if not isinstance(skip_ssl, bool):
        raise InputError("Error parsing input: 'skip_ssl_verification' must be a boolean")

    return Source(
        uri=uri,
        branch=_optional_str(data, "branch") or default_branch,
        include_paths=_str_list(data, "include_paths"),
        exclude_paths=_str_list(data, "exclude_paths"),
        tag_filter=_optional_str(data, "tag_filter") or None,
        skip_ssl_verification=skip_ssl,
        private_key=_optional_str(data, "private_key") or None,
    )


def _parse_version(data: Any) -> Version | None:
    if not isinstance(data, dict):
        raise InputError("Error parsing input: 'version' must be an object")
    ref = _optional_str(data, "ref")
    return Version(ref=ref) if ref else None


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise InputError(f"Error parsing input: '{key}' must be a string")
    return value


def _str_list(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InputError(f"Error parsing input: '{key}' must be a list of strings")
    return tuple(value)
