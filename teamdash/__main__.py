"""
Run the dashboard API server.

Usage:
    python -m teamdash
"""

import uvicorn

from teamdash.secure_config import get_config


def main() -> None:
    server = get_config().get_server_config()
    uvicorn.run("teamdash.api.app:app", host=server.host, port=server.port, log_level="info")


if __name__ == "__main__":
    main()
