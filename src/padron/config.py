"""Runtime configuration loaded from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_BASE = "https://fi.jcaguilar.dev/v1/escuela/persona"


@dataclass
class PadronConfig:
    """Configuration for the admin client.

    Attributes:
        api_base: Collection endpoint for person records.
        timeout: Transport timeout in seconds for every request.
        log_dir: Directory for the JSONL event log.
        log_max_size_mb: Size at which the event log is rotated.
    """

    api_base: str = DEFAULT_API_BASE
    timeout: float = 15.0
    log_dir: Path | None = None
    log_max_size_mb: float = 10.0

    def __post_init__(self) -> None:
        self.api_base = self.api_base.rstrip("/")
        if not self.api_base:
            raise ValueError("api_base must not be empty")

        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

        if self.log_dir is None:
            self.log_dir = Path.home() / ".padron" / "logs"
        else:
            self.log_dir = Path(self.log_dir).expanduser()


def config_from_env() -> PadronConfig:
    """Load configuration from environment variables."""
    log_dir = os.getenv("PADRON_LOG_DIR")
    return PadronConfig(
        api_base=os.getenv("PADRON_API_BASE", DEFAULT_API_BASE),
        timeout=float(os.getenv("PADRON_TIMEOUT", "15")),
        log_dir=Path(log_dir) if log_dir else None,
        log_max_size_mb=float(os.getenv("PADRON_LOG_MAX_MB", "10")),
    )
