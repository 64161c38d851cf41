"""
Langfuse tracing client with graceful degradation.

A process-wide singleton that stays disabled when credentials are missing
or the Langfuse host cannot be reached. All operations are no-ops while
disabled, so extraction never depends on observability.
"""

import logging
from typing import Any, Optional

from langfuse import Langfuse

logger = logging.getLogger(__name__)


class TracingClient:
    """Langfuse client wrapper (SDK v3)."""

    def __init__(
        self,
        public_key: str = "",
        secret_key: str = "",
        host: str = "",
        debug: bool = False,
    ):
        self._client: Optional[Langfuse] = None
        self._error: Optional[str] = None

        if not public_key or not secret_key:
            self._error = "Langfuse credentials not configured"
            logger.debug("Tracing disabled: %s", self._error)
            return

        if host and not host.startswith(("http://", "https://")):
            logger.warning(
                "LANGFUSE_HOST '%s' may be malformed. Expected http://host:port "
                "or https://host:port.",
                host,
            )

        kwargs: dict[str, Any] = {
            "public_key": public_key,
            "secret_key": secret_key,
            "debug": debug,
        }
        if host:
            kwargs["host"] = host

        try:
            client = Langfuse(**kwargs)
            if not client.auth_check():
                self._error = "Langfuse auth_check() failed - check host and credentials"
                logger.warning("Tracing disabled: %s", self._error)
                return
        except Exception as e:
            self._error = f"Failed to initialize Langfuse client: {e}"
            logger.warning("Tracing disabled: %s", self._error)
            return

        self._client = client
        logger.info("Langfuse tracing enabled (host: %s)", host or "default")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def error(self) -> Optional[str]:
        """Why tracing is disabled, if it is."""
        return self._error

    @property
    def client(self) -> Optional[Langfuse]:
        return self._client

    def flush(self) -> None:
        """Flush pending events to Langfuse."""
        if self._client is None:
            return
        try:
            self._client.flush()
        except Exception as e:
            logger.warning("Failed to flush tracing events: %s", e)

    def shutdown(self) -> None:
        """Flush and stop the background exporter."""
        if self._client is None:
            return
        try:
            self._client.shutdown()
            logger.info("Langfuse tracing client shutdown complete")
        except Exception as e:
            logger.warning("Error during tracing client shutdown: %s", e)


_tracing_client: Optional[TracingClient] = None


def init_tracing_client(
    public_key: str = "",
    secret_key: str = "",
    host: str = "",
    debug: bool = False,
) -> TracingClient:
    """Initialize the global tracing client singleton."""
    global _tracing_client
    _tracing_client = TracingClient(
        public_key=public_key,
        secret_key=secret_key,
        host=host,
        debug=debug,
    )
    return _tracing_client


def get_tracing_client() -> Optional[TracingClient]:
    """Get the global tracing client instance."""
    return _tracing_client


def shutdown_tracing() -> None:
    """Shutdown the global tracing client."""
    global _tracing_client
    if _tracing_client:
        _tracing_client.shutdown()
        _tracing_client = None
