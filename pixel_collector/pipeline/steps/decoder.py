import logging
from typing import List, Tuple
from urllib.parse import unquote_plus

from pixel_collector.models.event import TrackingEvent
from pixel_collector.pipeline.base import PipelineStep


logger = logging.getLogger(__name__)


class QueryStringDecoder(PipelineStep):
    """Best-effort decode of ``raw_query`` into ``fields``.

    Segments without ``=`` or with an empty key are skipped. When nothing
    usable is left the event is marked failed and no fields are written.
    """

    separator = "&"

    def apply(self, event: TrackingEvent) -> bool:
        pairs = self._parse(event.raw_query or "")
        if not pairs:
            logger.debug("No decodable fields in query for request %s", event.request_id)
            event.mark_failed()
            return False
        for key, value in pairs:
            event.set_field(key, value)
        return True

    def _parse(self, raw_query: str) -> List[Tuple[str, str]]:
        pairs: List[Tuple[str, str]] = []
        for segment in raw_query.split(self.separator):
            if not segment:
                continue
            key, sep, value = segment.partition("=")
            if not sep or not key:
                continue
            key = unquote_plus(key)
            if not key:
                continue
            pairs.append((key, unquote_plus(value)))
        return pairs
