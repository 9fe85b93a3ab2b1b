"""Recorded build attributes, kept in Amazon SimpleDB.

Each built spec has one SimpleDB item named
``{owner}/{repo}/{ref}/{spec path}`` whose attributes describe the last
successful build (e.g. ``commit_sha``). This module only reads them.
"""

from __future__ import annotations

import posixpath
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ConfigError, RemoteStoreError
from .shell import debug


def item_name(owner: str, repo: str, ref: str, spec_path: str) -> str:
    """Compose the SimpleDB item name for a spec.

    Example:
        item_name("acme", "rpms", "refs/heads/main", "foo/SPECS/foo.spec")
        → "acme/rpms/refs/heads/main/foo/SPECS/foo.spec"
    """
    return posixpath.join(owner, repo, ref, spec_path)


class SimpleDBStore:
    """Reads build records for one repository and ref from a SimpleDB domain.

    Lookups are plain blocking calls that either return the attributes or
    raise RemoteStoreError; the planner runs them in worker threads.
    """

    def __init__(
        self,
        domain: str,
        owner: str,
        repo: str,
        ref: str,
        *,
        client: Any = None,
        region: str | None = None,
    ) -> None:
        self.domain = domain
        self.owner = owner
        self.repo = repo
        self.ref = ref
        # boto3 clients are safe to share between threads
        if client is None:
            try:
                client = boto3.client("sdb", region_name=region)
            except BotoCoreError as exc:
                raise ConfigError(f"Cannot create SimpleDB client: {exc}") from exc
        self._client = client

    def get(self, spec_path: str) -> dict[str, str]:
        """Return the recorded attributes for a spec, or {} if none exist.

        Raises:
            RemoteStoreError: If SimpleDB cannot be reached or rejects the
                request (e.g. bad credentials or unknown domain).
        """
        item = item_name(self.owner, self.repo, self.ref, spec_path)
        debug(f'Retrieving package data from SimpleDB domain "{self.domain}": {item}')
        try:
            response = self._client.get_attributes(
                DomainName=self.domain, ItemName=item, ConsistentRead=True
            )
        except (BotoCoreError, ClientError) as exc:
            raise RemoteStoreError(item, str(exc)) from exc

        attrs = {a["Name"]: a["Value"] for a in response.get("Attributes", [])}
        debug(f"{item}: {attrs}")
        return attrs
