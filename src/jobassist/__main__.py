"""jobassist entrypoint.

Run with:
  python -m jobassist
"""

import logging
import os

import uvicorn


def main() -> None:
    logging.basicConfig(
        level=os.getenv("JOBASSIST_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    host = os.getenv("JOBASSIST_HOST", "0.0.0.0")
    port = int(os.getenv("JOBASSIST_PORT", "8000"))
    reload = os.getenv("JOBASSIST_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("jobassist.app:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
