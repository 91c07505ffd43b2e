# feedbackhub/__main__.py
"""
Run the feedback server: `python -m feedbackhub` (or the `feedbackhub` script).

Exits 1 if storage or the listening port can't be acquired at startup.
"""
import socket
import sys

import uvicorn

from feedbackhub import config
from feedbackhub import monitoring
from feedbackhub.app import create_app
from feedbackhub.errors import Unavailable
from feedbackhub.store import FeedbackStore


def _port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def main() -> int:
    try:
        store = FeedbackStore.from_url(config.DATABASE_URL)
    except Unavailable:
        monitoring.logger.exception("Could not open storage", extra={"database_url": config.DATABASE_URL})
        return 1

    if not _port_available(config.HOST, config.PORT):
        monitoring.logger.error("Port unavailable", extra={"host": config.HOST, "port": config.PORT})
        return 1

    monitoring.logger.info(
        "Server starting",
        extra={"url": f"http://localhost:{config.PORT}", "admin": f"http://localhost:{config.PORT}/admin"},
    )
    uvicorn.run(create_app(store), host=config.HOST, port=config.PORT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
