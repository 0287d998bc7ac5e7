"""Lifecycle of a single pass-time lookup run."""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional, Tuple

from isspass.observability.log import get_logger


LOGGER = get_logger(__name__)


class PipelineStage(str, enum.Enum):
    START = "start"
    AWAIT_IP = "await_ip"
    AWAIT_COORDS = "await_coords"
    AWAIT_PASSES = "await_passes"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[PipelineStage, FrozenSet[PipelineStage]] = {
    PipelineStage.START: frozenset({PipelineStage.AWAIT_IP}),
    PipelineStage.AWAIT_IP: frozenset({PipelineStage.AWAIT_COORDS, PipelineStage.FAILED}),
    PipelineStage.AWAIT_COORDS: frozenset({PipelineStage.AWAIT_PASSES, PipelineStage.FAILED}),
    PipelineStage.AWAIT_PASSES: frozenset({PipelineStage.DONE, PipelineStage.FAILED}),
    PipelineStage.DONE: frozenset(),
    PipelineStage.FAILED: frozenset(),
}


@dataclass
class PipelineRun:
    """Tracks where one orchestrator invocation is in the lookup chain."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    stage: PipelineStage = PipelineStage.START
    last_error: Optional[str] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    history: List[Tuple[PipelineStage, PipelineStage]] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.stage in (PipelineStage.DONE, PipelineStage.FAILED)

    def advance(self, target: PipelineStage) -> None:
        """Move to `target`, refusing transitions the chain does not allow."""
        if target not in _TRANSITIONS[self.stage]:
            raise RuntimeError(f"Illegal pipeline transition {self.stage.value} -> {target.value}")
        LOGGER.info("pipeline_stage", run_id=self.run_id, source=self.stage.value, target=target.value)
        self.history.append((self.stage, target))
        self.stage = target

    def mark_failed(self, error: BaseException) -> None:
        """Record the failure that ended the run."""
        self.last_error = str(error)
        self.advance(PipelineStage.FAILED)
