"""Best-effort persistence of the patient -> doctor selections.

A single background writer owns the snapshot file. ``submit`` drops the
latest snapshot into a one-slot mailbox and returns immediately; snapshots
that arrive while a write is in flight collapse to the newest one.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from careline.errors import PersistenceFailure
from careline.models.people import Selection

logger = logging.getLogger(__name__)

_selections_adapter = TypeAdapter(list[Selection])


def read_snapshot(path: str | Path) -> list[Selection]:
    """Read a persisted snapshot. Missing or unreadable files yield no pairs."""
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        logger.info("No selection snapshot at %s", snapshot_path)
        return []
    try:
        return _selections_adapter.validate_json(snapshot_path.read_bytes())
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable selection snapshot %s: %s", snapshot_path, e)
        return []


def write_snapshot(path: str | Path, snapshot: Mapping[int, int]) -> None:
    """Overwrite the snapshot file atomically with the full relation."""
    snapshot_path = Path(path)
    pairs = [
        {"patient_id": patient_id, "doctor_id": doctor_id}
        for patient_id, doctor_id in sorted(snapshot.items())
    ]
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=snapshot_path.parent, prefix=f".{snapshot_path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(pairs, f, indent=2)
        os.replace(tmp_name, snapshot_path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceFailure(f"cannot write {snapshot_path}: {e}") from e


class SelectionSink:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.writes = 0
        self._pending: dict[int, int] | None = None
        self._mailbox_lock = threading.Lock()
        self._wakeup = asyncio.Event()
        self._closing = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None

    def submit(self, snapshot: Mapping[int, int]) -> None:
        """Queue a snapshot for writing. Never blocks, never raises."""
        with self._mailbox_lock:
            self._pending = dict(snapshot)
        self._wake()

    def _wake(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            # Held in the mailbox until start() or close()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._wakeup.set()
        else:
            loop.call_soon_threadsafe(self._wakeup.set)

    def start(self) -> None:
        """Launch the writer task on the running event loop."""
        if self._task is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._closing = False
        self._task = asyncio.create_task(self._run(), name="selection-sink")
        with self._mailbox_lock:
            if self._pending is not None:
                self._wakeup.set()

    async def close(self) -> None:
        """Write whatever is pending, then stop the writer."""
        if self._task is None:
            await self._write_pending()
            return
        self._closing = True
        self._wakeup.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            await self._write_pending()
            if self._closing:
                # Anything submitted during the last write
                await self._write_pending()
                return

    async def _write_pending(self) -> None:
        with self._mailbox_lock:
            snapshot, self._pending = self._pending, None
        if snapshot is None:
            return
        try:
            await asyncio.to_thread(write_snapshot, self.path, snapshot)
        except PersistenceFailure as e:
            logger.error("Selection snapshot not persisted: %s", e)
            return
        self.writes += 1
        logger.debug("Persisted %d selections to %s", len(snapshot), self.path)
