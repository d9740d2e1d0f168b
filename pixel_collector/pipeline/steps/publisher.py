import json
import logging
from concurrent.futures import Future
from typing import Callable, Optional

from pixel_collector.models.event import TrackingEvent
from pixel_collector.pipeline.base import PipelineStep
from pixel_collector.sinks import eventhub


logger = logging.getLogger(__name__)


def _default_sink():
    return eventhub.get_sink()


class EventPublisher(PipelineStep):
    def __init__(self, sink_factory: Optional[Callable[[], object]] = None) -> None:
        self._sink_factory = sink_factory or _default_sink

    def apply(self, event: TrackingEvent) -> bool:
        if not event.ok:
            logger.debug("Skipping publish for failed request %s", event.request_id)
            return False
        try:
            payload = json.dumps(event.fields, separators=(",", ":"), ensure_ascii=False)
            sink = self._sink_factory()
            future = sink.publish(
                payload,
                {"request_id": event.request_id, "received_at": event.received_at},
            )
            future.add_done_callback(
                lambda done, request_id=event.request_id: self._on_complete(done, request_id)
            )
        except Exception:
            logger.exception("Failed to submit event for request %s", event.request_id)
            return False
        return True

    @staticmethod
    def _on_complete(future: Future, request_id: str) -> None:
        if future.cancelled():
            logger.warning("Publish for request %s was cancelled", request_id)
            return
        error = future.exception()
        if error is not None:
            logger.error(
                "Event for request %s was not delivered: %s", request_id, error,
                exc_info=(type(error), error, error.__traceback__),
            )
        else:
            logger.debug("Event for request %s delivered", request_id)
