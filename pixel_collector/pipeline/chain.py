import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from pixel_collector.models.event import TrackingEvent
from pixel_collector.pipeline.base import PipelineStep
from pixel_collector.pipeline.steps.decoder import QueryStringDecoder
from pixel_collector.pipeline.steps.publisher import EventPublisher


logger = logging.getLogger(__name__)


@dataclass
class ChainOutcome:
    success: bool
    failed_steps: List[str] = field(default_factory=list)


class ChainExecutor:
    """Runs every step in order; a raising step is logged and skipped over."""

    def __init__(self, steps: Iterable[PipelineStep]) -> None:
        self._steps: Tuple[PipelineStep, ...] = tuple(steps)

    @property
    def steps(self) -> Tuple[PipelineStep, ...]:
        return self._steps

    def append(self, step: PipelineStep) -> "ChainExecutor":
        return ChainExecutor(self._steps + (step,))

    def insert(self, index: int, step: PipelineStep) -> "ChainExecutor":
        steps: List[PipelineStep] = list(self._steps)
        steps.insert(index, step)
        return ChainExecutor(steps)

    def run(self, event: TrackingEvent) -> ChainOutcome:
        success = False
        failed: List[str] = []
        for step in self._steps:
            try:
                success = bool(step.apply(event))
            except Exception:
                logger.exception(
                    "Pipeline step %s failed for request %s", step.name, event.request_id
                )
                success = False
                failed.append(step.name)
        return ChainOutcome(success=success, failed_steps=failed)


def build_default_chain() -> ChainExecutor:
    return ChainExecutor([QueryStringDecoder(), EventPublisher()])
