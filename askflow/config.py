"""Client configuration loaded from the environment (and a .env file)."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()  # load environment variables from .env file

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class AskflowConfig:
    """Settings for talking to the askflow server."""

    api_url: str = "http://localhost:5000/api"
    timeout: float = 30.0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "AskflowConfig":
        return cls(
            api_url=os.getenv("ASKFLOW_API_URL", cls.api_url),
            timeout=float(os.getenv("ASKFLOW_TIMEOUT", str(cls.timeout))),
            log_level=os.getenv("ASKFLOW_LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: str | int = "WARNING") -> None:
    """Set up root logging once for applications embedding askflow."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_controller(config: AskflowConfig | None = None):
    """Build a FlowController talking to the configured server."""
    from askflow.core.controller import FlowController
    from askflow.sdk.client import HttpBackend

    config = config or AskflowConfig.from_env()
    configure_logging(config.log_level)
    return FlowController(HttpBackend(base_url=config.api_url, timeout=config.timeout))
