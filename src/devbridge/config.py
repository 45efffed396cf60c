"""Runtime configuration for the dev bridge server."""

from dataclasses import dataclass, replace
import os
import tempfile


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080


@dataclass(frozen=True)
class BridgeSettings:
    host: str
    port: int
    workspace_dir: str
    ping_interval: float | None
    ping_timeout: float | None
    log_file: str

    def override(self, **changes) -> "BridgeSettings":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def get_bridge_settings() -> BridgeSettings:
    """Load bridge settings from environment variables."""
    ping_interval = _env_float("DEVBRIDGE_PING_INTERVAL", 20.0)
    ping_timeout = _env_float("DEVBRIDGE_PING_TIMEOUT", 20.0)
    workspace = os.getenv("DEVBRIDGE_WORKSPACE")
    return BridgeSettings(
        host=os.getenv("DEVBRIDGE_HOST", DEFAULT_HOST),
        port=_env_int("DEVBRIDGE_PORT", DEFAULT_PORT),
        workspace_dir=os.path.abspath(workspace) if workspace else os.getcwd(),
        # websockets treats None as "disabled"
        ping_interval=ping_interval if ping_interval > 0 else None,
        ping_timeout=ping_timeout if ping_timeout > 0 else None,
        log_file=os.getenv(
            "DEVBRIDGE_LOG_FILE",
            os.path.join(tempfile.gettempdir(), "devbridge.log"),
        ),
    )
