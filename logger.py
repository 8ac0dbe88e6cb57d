# logger.py
import logging
import sys

LOG_FILE = "/var/log/hackeros-installer.log"
FALLBACK_LOG_FILE = "/tmp/hackeros-installer.log"

def setup_logger() -> logging.Logger:
    logger = logging.getLogger("hackeros_installer")
    logger.setLevel(logging.DEBUG)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # Live ISO sessions may not allow /var/log; fall back to /tmp
    try:
        fh = logging.FileHandler(LOG_FILE)
    except OSError:
        fh = logging.FileHandler(FALLBACK_LOG_FILE)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.WARNING)
    sh.setFormatter(fmt)

    if not logger.handlers:
        logger.addHandler(fh)
        logger.addHandler(sh)
    return logger

def log_file_path() -> str:
    """Return the file the installer is currently logging to."""
    for handler in log.handlers:
        if isinstance(handler, logging.FileHandler):
            return handler.baseFilename
    return LOG_FILE

log = setup_logger()
