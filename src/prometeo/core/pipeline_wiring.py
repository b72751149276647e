"""Factory helpers that wire a :class:`Pipeline` from configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from queue import Empty, Full, Queue
from typing import List, Optional

from ..config import PipelineConfig
from .pipeline import BandUpdate, Pipeline, PipelineCallbacks


def _offer_queue(queue: Queue, item: object) -> None:
    """Best-effort put that drops the oldest payload when the queue is full."""
    try:
        queue.put_nowait(item)
    except Full:
        try:
            queue.get_nowait()
        except Empty:
            pass
        queue.put_nowait(item)


@dataclass(slots=True)
class PipelineHandles:
    """Return value from :func:`build_pipeline` containing ready-to-use pieces."""

    pipeline: Pipeline
    update_queue: Queue[BandUpdate] | None = None
    updates: List[BandUpdate] = field(default_factory=list)

    def drain_queue(self) -> List[BandUpdate]:
        if self.update_queue is None:
            return []
        items: List[BandUpdate] = []
        while True:
            try:
                items.append(self.update_queue.get_nowait())
            except Empty:
                break
        return items


def build_pipeline(
    cfg: PipelineConfig | None = None,
    *,
    callbacks: Optional[PipelineCallbacks] = None,
    update_queue: Queue[BandUpdate] | None = None,
    queue_size: int = 0,
    collect_updates: bool = False,
) -> PipelineHandles:
    """
    Build a :class:`Pipeline` plus optional hand-off points for its updates.

    Parameters
    ----------
    cfg:
        Runtime configuration (usually loaded from YAML). Defaults when omitted.
    callbacks:
        Output hooks. ``on_band_powers`` is wrapped when a queue or collection
        is requested so the caller's own hook still runs.
    update_queue:
        Optional :class:`queue.Queue` receiving :class:`BandUpdate` objects,
        for consumers living on another thread (rendering, relay).
    queue_size:
        When > 0 and ``update_queue`` is omitted, a bounded queue of this size
        is created. Full queues drop their oldest update.
    collect_updates:
        Keep every update in ``PipelineHandles.updates`` (offline replay).
    """
    callbacks = callbacks or PipelineCallbacks()
    if update_queue is None and queue_size > 0:
        update_queue = Queue(maxsize=int(queue_size))

    if update_queue is None and not collect_updates:
        return PipelineHandles(pipeline=Pipeline(cfg, callbacks))

    user_hook = callbacks.on_band_powers

    def _on_band_powers(powers):
        update = pipeline.last_update
        if update is not None:
            if update_queue is not None:
                _offer_queue(update_queue, update)
            if collect_updates:
                handles.updates.append(update)
        if user_hook is not None:
            user_hook(powers)

    pipeline = Pipeline(cfg, replace(callbacks, on_band_powers=_on_band_powers))
    handles = PipelineHandles(pipeline=pipeline, update_queue=update_queue)
    return handles


__all__ = ["PipelineHandles", "build_pipeline"]
