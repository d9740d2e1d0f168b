import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TrackingEvent:
    """Per-request record threaded through the pipeline.

    ``raw_query`` is fixed at creation. ``fields`` only grows or overwrites and
    ``ok`` can be cleared but never set back.
    """

    raw_query: str
    fields: Dict[str, str] = field(default_factory=dict)
    ok: bool = True
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    received_at: str = field(default_factory=_now_iso)

    def __setattr__(self, name: str, value: object) -> None:
        if name in ("raw_query", "fields") and name in self.__dict__:
            raise AttributeError(f"{name} cannot be replaced once set")
        if name == "ok":
            value = bool(value)
            if value and "ok" in self.__dict__ and not self.__dict__["ok"]:
                raise ValueError("ok cannot be restored once cleared")
        super().__setattr__(name, value)

    def set_field(self, key: str, value: str) -> None:
        self.fields[key] = value

    def mark_failed(self) -> None:
        self.ok = False
