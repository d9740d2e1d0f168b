from abc import ABC, abstractmethod

from pixel_collector.models.event import TrackingEvent


class PipelineStep(ABC):
    """One transformation or dispatch applied to a tracking event.

    ``apply`` works on the event in place and reports whether it succeeded.
    The result is informational only: the chain runs every step regardless,
    so a step that should not act on a failed event has to check
    ``event.ok`` itself.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def apply(self, event: TrackingEvent) -> bool:
        raise NotImplementedError
