import logging
import time

from threading import Thread

import requests

from omegaconf import DictConfig
from werkzeug.serving import BaseWSGIServer, make_server

from layoutsmith.descriptions.server_app import LayoutDescriptionApp
from layoutsmith.descriptions.store import LayoutDescriptionStore
from layoutsmith.utils.network_utils import is_port_available

console_logger = logging.getLogger(__name__)


class LayoutDescriptionServer:
    """
    Runs the layout description app in a background thread of this process.

    Example:
        >>> with LayoutDescriptionServer(store, port=5000) as server:
        ...     client = LayoutDescriptionClient(server.base_url)
        ...     description = client.get_description("living-room")
    """

    def __init__(
        self,
        store: LayoutDescriptionStore,
        host: str = "127.0.0.1",
        port: int = 5000,
    ) -> None:
        """Initialize the server manager.

        Args:
            store: Store the served descriptions come from.
            host: The host address to bind the server to.
            port: The port number to bind to. 0 picks a free port on start.

        Raises:
            ValueError: If the specified port is not available.
        """
        if not is_port_available(host, port):
            raise ValueError(f"Port {port} is not available on {host}")

        self._store = store
        self._host = host
        self._port = port
        self._server: BaseWSGIServer | None = None
        self._server_thread: Thread | None = None
        self._running = False

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "LayoutDescriptionServer":
        return cls(
            store=LayoutDescriptionStore.from_config(cfg),
            host=str(cfg.server.host),
            port=int(cfg.server.port),
        )

    def start(self) -> None:
        """Start serving.

        Raises:
            RuntimeError: If server is already running or never becomes ready.
        """
        if self._running:
            raise RuntimeError("Server is already running")

        app = LayoutDescriptionApp(self._store)
        self._server = make_server(self._host, self._port, app, threaded=True)
        self._port = self._server.server_port

        console_logger.info(
            f"Starting layout description server on {self._host}:{self._port}"
        )
        self._server_thread = Thread(target=self._server.serve_forever, daemon=True)
        self._server_thread.start()

        try:
            self._wait_until_ready()
        except RuntimeError:
            self.stop()
            raise
        self._running = True
        console_logger.info(f"Layout description server ready at {self.base_url}")

    def stop(self) -> None:
        """Stop the server and wait for its thread to finish."""
        if self._server is None:
            console_logger.warning("Server is not running")
            return

        self._server.shutdown()
        self._server.server_close()
        if self._server_thread and self._server_thread.is_alive():
            self._server_thread.join(timeout=5)
            if self._server_thread.is_alive():
                console_logger.warning("Server thread did not stop gracefully")

        self._server = None
        self._server_thread = None
        self._running = False
        console_logger.info("Layout description server stopped")

    def is_running(self) -> bool:
        return self._running

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        """Bound port; resolved after start when constructed with port 0."""
        return self._port

    @property
    def base_url(self) -> str:
        return f"http://{self._host}:{self._port}"

    def _wait_until_ready(self, timeout: float = 10) -> None:
        start_time = time.time()
        while time.time() - start_time < timeout:
            try:
                response = requests.get(f"{self.base_url}/health", timeout=1)
                if response.status_code == 200:
                    return
            except requests.exceptions.RequestException:
                pass

            time.sleep(0.05)

        raise RuntimeError(f"Server did not become ready within {timeout} seconds")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
