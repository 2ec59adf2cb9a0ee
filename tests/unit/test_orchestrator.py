"""
Unit tests for the sync orchestrator.

Each test drives run_sync/run_empty with raw configuration (the way it
arrives from deployment config) and checks which storage calls were made.
"""

import pytest

from src.core.sync.errors import (
    BucketSyncError,
    ConfigError,
    ListError,
    OrchestratorError,
    WalkError,
)
from src.core.sync.orchestrator import SyncOrchestrator, parse_targets
from src.infrastructure.storage.client import MockStorageClient

from .conftest import FailingStorageClient, puts, write_files


class TestParseTargets:
    """Tests for validating raw target configuration."""

    @pytest.mark.parametrize("raw", [None, "dist:bkt1", {"bucketName": "bkt1"}, 42])
    def test_non_list_means_no_configuration(self, raw):
        assert parse_targets(raw) is None

    def test_valid_list(self):
        targets = parse_targets([
            {"bucketName": "bkt1", "localDir": "dist"},
            {"bucketName": "bkt2", "localDir": "public"},
        ])

        assert [t.bucket_name for t in targets] == ["bkt1", "bkt2"]

    def test_one_invalid_entry_fails_the_batch(self):
        with pytest.raises(ConfigError):
            parse_targets([
                {"bucketName": "bkt1", "localDir": "dist"},
                {"localDir": "public"},
            ])


class TestRunSync:
    """Tests for the two-phase sync run."""

    @pytest.mark.asyncio
    async def test_one_empty_then_three_puts(self, tmp_path):
        """dist with 3 files -> 1 listing (empty) + 3 puts, all to bkt1."""
        dist = write_files(tmp_path / "dist", {"a.txt": b"a", "b/c.json": b"{}", "index.html": b""})
        storage = MockStorageClient(buckets=["bkt1"])
        orchestrator = SyncOrchestrator(storage)

        report = await orchestrator.run_sync([{"bucketName": "bkt1", "localDir": str(dist)}])

        lists = [op for op in storage.operations if op[0] == "list"]
        assert lists == [("list", "bkt1", None)]
        assert sorted(puts(storage)) == [
            ("bkt1", "a.txt"),
            ("bkt1", "b/c.json"),
            ("bkt1", "index.html"),
        ]
        assert report.phase == "sync"
        assert report.uploaded_count == 3

    @pytest.mark.asyncio
    async def test_existing_objects_are_replaced(self, site_dir):
        """Stale objects from the previous deploy are gone after a sync."""
        storage = MockStorageClient(buckets=["bkt1"])
        await storage.put_object("bkt1", "old/removed.html", b"", "text/html")

        report = await SyncOrchestrator(storage).run_sync(
            [{"bucketName": "bkt1", "localDir": str(site_dir)}]
        )

        assert storage.keys("bkt1") == {"a.txt", "b/c.json"}
        assert report.deleted_count == 1

    @pytest.mark.asyncio
    async def test_no_upload_before_empty_resolves(self, tmp_path):
        one = write_files(tmp_path / "one", {"a.txt": b"a"})
        two = write_files(tmp_path / "two", {"b.txt": b"b"})
        storage = MockStorageClient(buckets=["bkt1", "bkt2"])
        await storage.put_object("bkt1", "stale", b"", "text/plain")
        await storage.put_object("bkt2", "stale", b"", "text/plain")
        storage.operations.clear()

        await SyncOrchestrator(storage).run_sync([
            {"bucketName": "bkt1", "localDir": str(one)},
            {"bucketName": "bkt2", "localDir": str(two)},
        ])

        kinds = [op[0] for op in storage.operations]
        first_put = kinds.index("put")
        assert set(kinds[:first_put]) == {"list", "delete"}
        assert "list" not in kinds[first_put:] and "delete" not in kinds[first_put:]

    @pytest.mark.asyncio
    async def test_missing_bucket_name_fails_before_any_call(self, site_dir):
        storage = MockStorageClient(buckets=["bkt1"])

        with pytest.raises(ConfigError):
            await SyncOrchestrator(storage).run_sync([
                {"bucketName": "bkt1", "localDir": str(site_dir)},
                {"localDir": str(site_dir)},
            ])

        assert storage.operations == []

    @pytest.mark.parametrize("raw", [None, "not-a-list", {"bucketName": "bkt1"}])
    @pytest.mark.asyncio
    async def test_absent_configuration_is_a_silent_no_op(self, raw):
        storage = MockStorageClient()

        report = await SyncOrchestrator(storage).run_sync(raw)

        assert report.phase == "none"
        assert storage.operations == []

    @pytest.mark.asyncio
    async def test_empty_list_runs_no_operations(self):
        storage = MockStorageClient()

        report = await SyncOrchestrator(storage).run_sync([])

        assert report.phase == "sync"
        assert storage.operations == []

    @pytest.mark.asyncio
    async def test_empty_phase_failure_skips_sync_phase(self, site_dir):
        """Strict mode + missing bucket: nothing gets uploaded anywhere."""
        storage = MockStorageClient(buckets=["bkt1"])

        with pytest.raises(OrchestratorError) as exc_info:
            await SyncOrchestrator(storage, strict=True).run_sync([
                {"bucketName": "bkt1", "localDir": str(site_dir)},
                {"bucketName": "nonexistent-bucket", "localDir": str(site_dir)},
            ])

        assert exc_info.value.phase == "empty"
        assert [type(e) for e in exc_info.value.errors] == [ListError]
        assert puts(storage) == []
        # the healthy bucket's empty still ran to completion
        assert ("list", "bkt1", None) in storage.operations

    @pytest.mark.asyncio
    async def test_lenient_mode_syncs_into_missing_bucket(self, site_dir):
        storage = MockStorageClient()

        report = await SyncOrchestrator(storage, strict=False).run_sync(
            [{"bucketName": "fresh-bucket", "localDir": str(site_dir)}]
        )

        assert report.emptied[0].bucket_missing
        assert storage.keys("fresh-bucket") == {"a.txt", "b/c.json"}

    @pytest.mark.asyncio
    async def test_failing_target_does_not_stop_other_targets(self, tmp_path, site_dir):
        storage = MockStorageClient(buckets=["bkt1", "bkt2"])

        with pytest.raises(OrchestratorError) as exc_info:
            await SyncOrchestrator(storage).run_sync([
                {"bucketName": "bkt1", "localDir": str(tmp_path / "missing")},
                {"bucketName": "bkt2", "localDir": str(site_dir)},
            ])

        assert exc_info.value.phase == "sync"
        assert [type(e) for e in exc_info.value.errors] == [WalkError]
        assert storage.keys("bkt2") == {"a.txt", "b/c.json"}

    @pytest.mark.asyncio
    async def test_upload_failures_are_aggregated(self, site_dir):
        storage = FailingStorageClient(buckets=["bkt1"], fail_keys={"a.txt"})

        with pytest.raises(OrchestratorError) as exc_info:
            await SyncOrchestrator(storage).run_sync(
                [{"bucketName": "bkt1", "localDir": str(site_dir)}]
            )

        error = exc_info.value.errors[0]
        assert isinstance(error, BucketSyncError)
        assert error.failures[0].key == "a.txt"
        assert storage.keys("bkt1") == {"b/c.json"}

    @pytest.mark.asyncio
    async def test_shared_bucket_is_emptied_once(self, tmp_path):
        one = write_files(tmp_path / "one", {"a.txt": b"a"})
        two = write_files(tmp_path / "two", {"b.txt": b"b"})
        storage = MockStorageClient(buckets=["bkt1"])

        await SyncOrchestrator(storage).run_sync([
            {"bucketName": "bkt1", "localDir": str(one)},
            {"bucketName": "bkt1", "localDir": str(two)},
        ])

        assert [op for op in storage.operations if op[0] == "list"] == [("list", "bkt1", None)]
        assert storage.keys("bkt1") == {"a.txt", "b.txt"}


class TestRunEmpty:
    """Tests for the teardown run."""

    @pytest.mark.asyncio
    async def test_empties_every_bucket_without_uploading(self, site_dir):
        storage = MockStorageClient(buckets=["bkt1", "bkt2"])
        await storage.put_object("bkt1", "a.txt", b"a", "text/plain")
        await storage.put_object("bkt2", "b.txt", b"b", "text/plain")
        storage.operations.clear()

        report = await SyncOrchestrator(storage).run_empty([
            {"bucketName": "bkt1", "localDir": str(site_dir)},
            {"bucketName": "bkt2", "localDir": str(site_dir)},
        ])

        assert report.phase == "empty"
        assert report.deleted_count == 2
        assert storage.keys("bkt1") == set()
        assert storage.keys("bkt2") == set()
        assert puts(storage) == []

    @pytest.mark.asyncio
    async def test_local_dir_is_not_read(self, tmp_path):
        """Teardown never touches the filesystem, but still validates config."""
        storage = MockStorageClient(buckets=["bkt1"])

        report = await SyncOrchestrator(storage).run_empty(
            [{"bucketName": "bkt1", "localDir": str(tmp_path / "gone")}]
        )

        assert report.emptied[0].bucket_name == "bkt1"

    @pytest.mark.asyncio
    async def test_missing_local_dir_field_still_fails(self):
        storage = MockStorageClient(buckets=["bkt1"])

        with pytest.raises(ConfigError):
            await SyncOrchestrator(storage).run_empty([{"bucketName": "bkt1"}])

        assert storage.operations == []

    @pytest.mark.asyncio
    async def test_nonexistent_bucket_strict_vs_lenient(self):
        targets = [{"bucketName": "nonexistent-bucket", "localDir": "dist"}]

        lenient = await SyncOrchestrator(MockStorageClient(), strict=False).run_empty(targets)
        assert lenient.emptied[0].bucket_missing

        with pytest.raises(OrchestratorError) as exc_info:
            await SyncOrchestrator(MockStorageClient(), strict=True).run_empty(targets)
        assert isinstance(exc_info.value.errors[0], ListError)

    @pytest.mark.asyncio
    async def test_absent_configuration_is_a_silent_no_op(self):
        storage = MockStorageClient()

        report = await SyncOrchestrator(storage).run_empty(None)

        assert report.phase == "none"
        assert storage.operations == []
