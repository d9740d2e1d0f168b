import os
from typing import Dict

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator


_SINK_ENV: Dict[str, str] = {
    "namespace": "EVENTHUB_NAMESPACE",
    "eventhub_name": "EVENTHUB_NAME",
    "key_name": "EVENTHUB_KEY_NAME",
    "key": "EVENTHUB_KEY",
}

_SERVICE_BUS_SUFFIX = "servicebus.windows.net"


class ConfigurationError(RuntimeError):
    """Raised when the event stream credentials are missing or blank."""


class SinkSettings(BaseModel):
    namespace: str
    eventhub_name: str
    key_name: str
    key: str

    @field_validator("namespace", "eventhub_name", "key_name", "key")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @property
    def fully_qualified_namespace(self) -> str:
        # Accept either the bare namespace or its full host name
        if "." in self.namespace:
            return self.namespace
        return f"{self.namespace}.{_SERVICE_BUS_SUFFIX}"

    @property
    def connection_string(self) -> str:
        return (
            f"Endpoint=sb://{self.fully_qualified_namespace}/;"
            f"SharedAccessKeyName={self.key_name};"
            f"SharedAccessKey={self.key};"
            f"EntityPath={self.eventhub_name}"
        )


def load_sink_settings() -> SinkSettings:
    load_dotenv()
    values = {name: os.getenv(env, "") for name, env in _SINK_ENV.items()}
    missing = [env for name, env in _SINK_ENV.items() if not values[name].strip()]
    if missing:
        raise ConfigurationError(f"{', '.join(missing)} required")
    return SinkSettings(**values)


def log_file() -> str:
    return os.getenv("PIXEL_LOG_FILE", "pixel-collector.log")


def log_level() -> str:
    return os.getenv("PIXEL_LOG_LEVEL", "INFO").upper()


def max_pending_sends() -> int:
    try:
        return max(1, int(os.getenv("EVENTHUB_MAX_PENDING", "1000")))
    except ValueError:
        return 1000
