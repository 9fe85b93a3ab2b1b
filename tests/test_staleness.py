"""Tests for lazy_rpms.staleness."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from lazy_rpms.errors import RemoteStoreError
from lazy_rpms.models import FileChange
from lazy_rpms.staleness import StalenessOracle, parse_timestamp

SPEC = "foo/SPECS/foo.spec"


@pytest.fixture
def history() -> MagicMock:
    mock = MagicMock()
    mock.last_change.return_value = FileChange(
        revision="abc123", timestamp=1_700_000_000
    )
    return mock


@pytest.fixture
def store() -> MagicMock:
    mock = MagicMock()
    mock.get.return_value = {}
    return mock


class TestCommitScheme:
    def test_matching_commit_is_up_to_date(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"commit_sha": "abc123"}

        verdict = StalenessOracle(store, history).check(SPEC)

        assert verdict.path == SPEC
        assert not verdict.needs_build
        history.last_change.assert_called_once_with(SPEC)
        store.get.assert_called_once_with(SPEC)

    def test_different_commit_needs_build(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"commit_sha": "def456"}

        verdict = StalenessOracle(store, history).check(SPEC)

        assert verdict.needs_build
        assert "def456" in verdict.reason

    def test_no_build_record_needs_build(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        verdict = StalenessOracle(store, history).check(SPEC)

        assert verdict.needs_build
        assert verdict.reason == "never built"

    def test_record_without_commit_needs_build(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"build_timestamp": "1700000000"}

        assert StalenessOracle(store, history).check(SPEC).needs_build

    def test_no_history_needs_build_without_store_lookup(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        history.last_change.return_value = None

        verdict = StalenessOracle(store, history).check(SPEC)

        assert verdict.needs_build
        assert verdict.reason == "no commit history"
        store.get.assert_not_called()

    def test_force_skips_all_lookups(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"commit_sha": "abc123"}

        verdict = StalenessOracle(store, history).check(SPEC, force=True)

        assert verdict.needs_build
        assert verdict.reason == "forced"
        history.last_change.assert_not_called()
        store.get.assert_not_called()

    def test_store_error_propagates(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.side_effect = RemoteStoreError("item", "access denied")

        with pytest.raises(RemoteStoreError):
            StalenessOracle(store, history).check(SPEC)


class TestTimestampScheme:
    def test_built_after_change_is_up_to_date(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"build_timestamp": "1700000100"}

        verdict = StalenessOracle(store, history, "timestamp").check(SPEC)

        assert not verdict.needs_build

    def test_built_at_change_time_is_up_to_date(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"build_timestamp": "1700000000"}

        assert not StalenessOracle(store, history, "timestamp").check(SPEC).needs_build

    def test_built_before_change_needs_build(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"build_timestamp": "1699999999"}

        assert StalenessOracle(store, history, "timestamp").check(SPEC).needs_build

    def test_iso_timestamp(self, store: MagicMock, history: MagicMock) -> None:
        # 1700000000 is 2023-11-14T22:13:20Z
        store.get.return_value = {"build_timestamp": "2023-11-14T22:15:00+00:00"}

        assert not StalenessOracle(store, history, "timestamp").check(SPEC).needs_build

    def test_unparseable_timestamp_needs_build(
        self, store: MagicMock, history: MagicMock
    ) -> None:
        store.get.return_value = {"build_timestamp": "yesterday"}

        assert StalenessOracle(store, history, "timestamp").check(SPEC).needs_build

    def test_commit_record_ignored(self, store: MagicMock, history: MagicMock) -> None:
        store.get.return_value = {"commit_sha": "abc123"}

        assert StalenessOracle(store, history, "timestamp").check(SPEC).needs_build


class TestParseTimestamp:
    def test_epoch(self) -> None:
        assert parse_timestamp("1700000000") == 1_700_000_000

    def test_iso_with_offset(self) -> None:
        assert parse_timestamp("2023-11-15T00:13:20+02:00") == 1_700_000_000

    def test_naive_iso_is_utc(self) -> None:
        assert parse_timestamp("2023-11-14T22:13:20") == 1_700_000_000

    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2023-11-14T22:13:20Z") == 1_700_000_000

    def test_garbage(self) -> None:
        assert parse_timestamp("not a time") is None
