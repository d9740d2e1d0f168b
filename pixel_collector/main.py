import base64
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from pixel_collector.logging_config import APP_NAME, configure_logging
from pixel_collector.models.event import TrackingEvent
from pixel_collector.pipeline.chain import build_default_chain
from pixel_collector.sinks.eventhub import close_sink, get_sink


logger = logging.getLogger(__name__)

PIXEL_GIF = base64.b64decode("R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7")
PIXEL_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate", "Pragma": "no-cache"}

pixel_chain = build_default_chain()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Missing credentials must stop the service before it takes traffic
    get_sink()
    yield
    close_sink()


app = FastAPI(title=APP_NAME, lifespan=lifespan)


def _pixel_response() -> Response:
    return Response(content=PIXEL_GIF, media_type="image/gif", headers=PIXEL_HEADERS)


@app.get("/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    return "ok"


@app.get("/pixel")
async def pixel(request: Request) -> Response:
    """
    Tracking beacon.
    - The whole payload is the query string (e.g. ?ev=open&mid=42).
    - Decoded fields are forwarded to the event stream without waiting.
    - Always answers with a 1x1 GIF, whatever happened downstream.
    """
    try:
        event = TrackingEvent(raw_query=request.url.query)
        outcome = pixel_chain.run(event)
        logger.debug(
            "Pixel request %s processed success=%s failed_steps=%s",
            event.request_id, outcome.success, outcome.failed_steps,
        )
    except Exception:
        logger.exception("error processing pixel request")
    return _pixel_response()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
