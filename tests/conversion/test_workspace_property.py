"""Property-based tests for the scratch workspace.

Validates path uniqueness under concurrency and idempotent cleanup.
"""

import asyncio
import os
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from videonote.modules.conversion.workspace import Workspace, workspace_scope


class TestWorkspaceUniqueness:
    """Concurrent acquisitions never share a path."""

    @given(count=st.integers(min_value=1, max_value=64))
    @settings(max_examples=50, deadline=None)
    def test_acquisitions_are_pairwise_disjoint(self, count: int) -> None:
        with tempfile.TemporaryDirectory() as work_dir:
            workspaces = [Workspace.acquire(work_dir) for _ in range(count)]

            paths = [path for ws in workspaces for path in ws.paths]
            assert len(set(paths)) == 2 * count

    @pytest.mark.asyncio
    async def test_concurrent_acquire_yields_disjoint_pairs(self, tmp_path: Path) -> None:
        async def acquire() -> Workspace:
            await asyncio.sleep(0)
            return Workspace.acquire(tmp_path)

        workspaces = await asyncio.gather(*(acquire() for _ in range(100)))

        paths = [path for ws in workspaces for path in ws.paths]
        assert len(set(paths)) == 200

    def test_acquire_writes_nothing(self, tmp_path: Path) -> None:
        workspace = Workspace.acquire(tmp_path / "nested")

        assert workspace.input_path.parent.is_dir()
        assert not workspace.input_path.exists()
        assert not workspace.output_path.exists()
        assert workspace.input_path != workspace.output_path


class TestWorkspaceRelease:
    """Cleanup is idempotent and tolerant of missing files."""

    def test_release_removes_both_files(self, tmp_path: Path) -> None:
        workspace = Workspace.acquire(tmp_path)
        workspace.write_input(b"source")
        workspace.output_path.write_bytes(b"note")

        assert workspace.release() is True

        assert not workspace.input_path.exists()
        assert not workspace.output_path.exists()

    def test_release_twice_is_noop(self, tmp_path: Path) -> None:
        workspace = Workspace.acquire(tmp_path)
        workspace.write_input(b"source")

        assert workspace.release() is True
        assert workspace.release() is True
        assert workspace.released is True

    def test_release_tolerates_externally_removed_file(self, tmp_path: Path) -> None:
        workspace = Workspace.acquire(tmp_path)
        workspace.write_input(b"source")
        workspace.output_path.write_bytes(b"note")
        os.remove(workspace.output_path)

        assert workspace.release() is True
        assert not workspace.input_path.exists()

    def test_release_without_any_file(self, tmp_path: Path) -> None:
        assert Workspace.acquire(tmp_path).release() is True

    def test_release_logs_cleanup_failure_instead_of_raising(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        workspace = Workspace.acquire(tmp_path)
        # A directory in the output slot cannot be removed with os.remove
        workspace.output_path.mkdir()

        with caplog.at_level("WARNING"):
            assert workspace.release() is False

        assert any("CleanupFailed" in record.getMessage() for record in caplog.records)


class TestWorkspaceScope:
    """The scope releases on every exit path."""

    @pytest.mark.asyncio
    async def test_scope_releases_on_success(self, tmp_path: Path) -> None:
        async with workspace_scope(tmp_path) as workspace:
            workspace.write_input(b"source")

        assert workspace.released
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_scope_releases_on_error(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            async with workspace_scope(tmp_path) as workspace:
                workspace.write_input(b"source")
                raise RuntimeError("engine exploded")

        assert workspace.released
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_scope_releases_on_cancellation(self, tmp_path: Path) -> None:
        entered = asyncio.Event()
        holder: dict = {}

        async def hold() -> None:
            async with workspace_scope(tmp_path) as workspace:
                holder["workspace"] = workspace
                workspace.write_input(b"source")
                entered.set()
                await asyncio.sleep(3600)

        task = asyncio.create_task(hold())
        await entered.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert holder["workspace"].released
        assert list(tmp_path.iterdir()) == []
