from __future__ import annotations

import time
from typing import Callable

from app.schemas import ChartDocument
from cli.config import CLIConfig
from services.ingestion import IngestionService
from services.projection import ChartProjector, ChartSelection, build_default_projector
from sources.push import PushChannel
from sources.snapshot import SnapshotClient


class ChartFeed:
    """Ingestion plus projection, scoped to a single CLI invocation."""

    def __init__(self, config: CLIConfig, projector: ChartProjector | None = None) -> None:
        self._config = config
        self.projector = projector or build_default_projector()
        self.ingestion = IngestionService(
            snapshot_client=SnapshotClient(
                base_url=config.base_url,
                path=config.snapshot_path,
                timeout=config.timeout,
            ),
            channel=PushChannel(
                url=config.base_url,
                event_name=config.event_name,
                timeout=config.timeout,
            ),
            token=config.token,
        )

    def close(self) -> None:
        self.ingestion.shutdown()

    def load(self) -> bool:
        return self.ingestion.load_snapshot()

    def subscribe(self) -> bool:
        return self.ingestion.subscribe()

    def render(self, selection: ChartSelection) -> ChartDocument:
        return self.projector.render(self.ingestion.store.readings(), selection)

    def watch(
        self,
        selection: ChartSelection,
        on_update: Callable[[ChartDocument], None],
        interval: float,
        duration: float,
        refresh: bool = False,
    ) -> int:
        """Re-render every ``interval`` seconds until ``duration`` elapses.

        Returns the number of renders performed.
        """
        deadline = time.monotonic() + duration
        renders = 0
        while True:
            on_update(self.render(selection))
            renders += 1
            if time.monotonic() + interval > deadline:
                return renders
            time.sleep(interval)
            if refresh:
                self.ingestion.refresh()
