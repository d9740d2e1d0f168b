from pixel_collector.pipeline.steps.decoder import QueryStringDecoder
from pixel_collector.pipeline.steps.publisher import EventPublisher

__all__ = ["QueryStringDecoder", "EventPublisher"]
