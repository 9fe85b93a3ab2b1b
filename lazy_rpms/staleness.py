"""Change detection: does a spec need to be rebuilt?

A spec is up to date when the build recorded in the attribute store
matches the last commit touching the spec file. Anything that cannot be
confirmed up to date is rebuilt.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from .models import StalenessVerdict
from .shell import GitHistory, debug
from .store import SimpleDBStore

Scheme = Literal["commit", "timestamp"]

COMMIT_ATTR = "commit_sha"
TIMESTAMP_ATTR = "build_timestamp"


def parse_timestamp(value: str) -> int | None:
    """Parse a recorded build time given as epoch seconds or ISO 8601.

    Naive ISO timestamps are taken as UTC. Returns None if unparseable.
    """
    try:
        return int(value)
    except ValueError:
        pass
    try:
        # fromisoformat only accepts a "Z" suffix from Python 3.11
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def _stale(path: str, reason: str) -> StalenessVerdict:
    return StalenessVerdict(path=path, needs_build=True, reason=reason)


def _fresh(path: str) -> StalenessVerdict:
    return StalenessVerdict(path=path, needs_build=False, reason="up to date")


class StalenessOracle:
    """Decides per spec whether a build is needed.

    Args:
        store: Source of recorded build attributes.
        history: Source of the last commit touching a file.
        scheme: "commit" compares commit hashes; "timestamp" compares the
            recorded build time against the last commit time.
    """

    def __init__(
        self, store: SimpleDBStore, history: GitHistory, scheme: Scheme = "commit"
    ) -> None:
        self.store = store
        self.history = history
        self.scheme = scheme

    def check(self, spec_path: str, force: bool = False) -> StalenessVerdict:
        """Decide whether ``spec_path`` needs a build.

        Forced specs, specs without commit history and specs without a
        recorded build all need one.

        Raises:
            HistoryError: If git fails for the spec.
            RemoteStoreError: If the build record cannot be fetched.
        """
        if force:
            debug(f'Ignoring update status for "{spec_path}"')
            return _stale(spec_path, "forced")

        change = self.history.last_change(spec_path)
        if change is None:
            debug(f'Could not determine file commit for "{spec_path}"')
            return _stale(spec_path, "no commit history")
        debug(f'"{spec_path}" file commit: {change.revision} ({change.timestamp})')

        attrs = self.store.get(spec_path)
        if self.scheme == "timestamp":
            return self._compare_timestamp(spec_path, change.timestamp, attrs)
        return self._compare_commit(spec_path, change.revision, attrs)

    def _compare_commit(
        self, spec_path: str, revision: str, attrs: dict[str, str]
    ) -> StalenessVerdict:
        build_commit = attrs.get(COMMIT_ATTR)
        if not build_commit:
            debug(f'Could not determine build commit for "{spec_path}"')
            return _stale(spec_path, "never built")
        debug(f'"{spec_path}" build commit: {build_commit}')

        if build_commit == revision:
            return _fresh(spec_path)
        return _stale(spec_path, f"changed since {build_commit[:12]}")

    def _compare_timestamp(
        self, spec_path: str, changed_at: int, attrs: dict[str, str]
    ) -> StalenessVerdict:
        raw = attrs.get(TIMESTAMP_ATTR)
        built_at = parse_timestamp(raw) if raw else None
        if built_at is None:
            debug(f'Could not determine build time for "{spec_path}"')
            return _stale(spec_path, "never built")
        debug(f'"{spec_path}" build time: {built_at}')

        if built_at >= changed_at:
            return _fresh(spec_path)
        return _stale(spec_path, "changed since last build")
