import os
import sys
import traceback
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env before reading PORT/HOST/ENVIRONMENT
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _unhandled_exception(exc_type, exc_value, exc_tb):
    """Log unhandled exceptions so the process manager's log shows the cause"""
    if exc_type is KeyboardInterrupt:
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    msg = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    print("Unhandled exception (process will exit):\n" + msg, file=sys.stderr, flush=True)
    sys.__excepthook__(exc_type, exc_value, exc_tb)


def main() -> None:
    """
    Entry point for the Minbar API server.

    File-backed storage serializes writes with in-process locks, so the
    server always runs a single worker.
    """
    root_dir = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, root_dir)
    sys.excepthook = _unhandled_exception

    from minbar.utils.config import get_settings

    settings = get_settings()
    environment = settings.app.environment.lower()

    print(f"Starting {settings.app.name} on http://{settings.app.host}:{settings.app.port}")
    print(f"Environment: {environment}, storage: {settings.storage.backend}, auth: {settings.auth.strategy}")

    try:
        uvicorn.run(
            "web.main:create_app",
            factory=True,
            host=settings.app.host,
            port=settings.app.port,
            reload=environment == "development",
            log_level="info" if environment == "production" else "debug",
        )
    except KeyboardInterrupt:
        print("\n\nShutdown complete.")
        sys.exit(0)
    except Exception as e:
        print(f"\nFatal error: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
