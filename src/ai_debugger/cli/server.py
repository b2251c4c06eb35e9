from typing import Optional

from rich.console import Console
from rich.pretty import Pretty

from ai_debugger.client.client import DebugClient
from ai_debugger.config import ServerConfig
from ai_debugger.interfaces.api.main import run
from ai_debugger.logging.logger import LoggingConfig


class ServerCommands:
    """Commands for running and checking the debugger API."""

    def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        reload: Optional[bool] = None,
        logging_enabled: bool = True,
    ) -> None:
        """
        Serve the API with uvicorn.

        Args:
            host: Interface to bind, defaults to ``HOST`` or 0.0.0.0
            port: Port to bind, defaults to ``PORT`` or 4000
            reload: Reload on code changes, defaults to ``ENV=development``
            logging_enabled: Whether to log requests and provider calls
        """
        LoggingConfig().enabled = logging_enabled

        defaults = ServerConfig.from_env()
        run(
            ServerConfig(
                host=host or defaults.host,
                port=int(port or defaults.port),
                reload=defaults.reload if reload is None else bool(reload),
            )
        )

    def health(self, server: Optional[str] = None) -> None:
        """Print the health report of a running server."""
        with DebugClient(server) as client:
            Console().print(Pretty(client.health()))
