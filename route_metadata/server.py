# path: route-metadata-api/route_metadata/server.py
"""Launch: route-metadata-api  (serves on HOST:PORT)."""

import uvicorn

from route_metadata.config import HOST, LOG_LEVEL, PORT


def main():
    uvicorn.run("route_metadata.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
