"""DocMargin - inline comments for Markdown documents.

Comments live inside the documents themselves as HTML-comment markers, so a
document remains the single source of truth for its annotations.
"""

import logging
import os
import subprocess
from logging.handlers import RotatingFileHandler

__version__ = "0.1.0"


def get_git_commit() -> str:
    """Get the short git commit hash, or 'unknown' if not in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
        return result.stdout.strip()
    except (
        subprocess.CalledProcessError,
        FileNotFoundError,
        subprocess.TimeoutExpired,
    ):
        return "unknown"


def get_version_string() -> str:
    """Get version string with git commit for dev builds."""
    commit = get_git_commit()
    return f"{__version__}+{commit}"


def _setup_logging() -> None:
    """Configure logging to both console and rotating file."""
    from docmargin.config import get_settings

    settings = get_settings()
    log_dir = settings.app.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"docmargin.{os.getpid()}.log"

    # Root logger config
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.dev.log_level.upper())
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the DocMargin application."""
    from nicegui import app, ui

    from docmargin.api import router
    from docmargin.config import get_settings

    _setup_logging()

    app.include_router(router)

    import docmargin.pages  # noqa: F401 - registers routes

    settings = get_settings()
    settings.app.docs_dir.mkdir(parents=True, exist_ok=True)

    port = settings.app.port
    storage_secret = settings.app.storage_secret.get_secret_value()

    print(f"DocMargin v{get_version_string()}")
    print(f"Serving documents from {settings.app.docs_dir.absolute()}")
    print(f"Starting application on http://0.0.0.0:{port}")

    ui.run(
        host="0.0.0.0",  # nosec B104
        port=port,
        title="DocMargin",
        reload=settings.dev.reload,
        storage_secret=storage_secret,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
