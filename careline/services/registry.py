import logging
from pathlib import Path

from careline.services.directory import Directory, load_seed
from careline.services.notifications import NotificationHub
from careline.services.persistence import SelectionSink, read_snapshot
from careline.services.relations import RelationStore

logger = logging.getLogger(__name__)


class Registry:
    """Process-wide context handed to every request handler.

    Built once at startup from the seed, started and closed by the app
    lifespan.
    """

    def __init__(
        self,
        directory: Directory,
        hub: NotificationHub,
        sink: SelectionSink,
        relations: RelationStore,
        heartbeat: float = 25.0,
    ) -> None:
        self.directory = directory
        self.hub = hub
        self.sink = sink
        self.relations = relations
        self.heartbeat = heartbeat

    @classmethod
    def from_files(
        cls,
        seed_path: str | Path,
        selections_path: str | Path,
        heartbeat: float = 25.0,
    ) -> "Registry":
        """Load the seed (raises ``SeedError``) and merge the last snapshot."""
        directory = Directory.from_seed(load_seed(seed_path))
        hub = NotificationHub()
        sink = SelectionSink(selections_path)
        relations = RelationStore(directory, hub, sink)
        loaded = relations.load(read_snapshot(selections_path))
        logger.info("Loaded %d selections from %s", loaded, selections_path)
        return cls(directory, hub, sink, relations, heartbeat=heartbeat)

    def start(self) -> None:
        self.sink.start()

    async def close(self) -> None:
        await self.sink.close()
