import logging
import os

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

log_dir = "app_log"


def configure_logging(directory: str = log_dir, level: int = logging.INFO,
                      filename: str = "logstudio.log") -> logging.Logger:
    """
    Send application logs to a file

    The terminal belongs to the UI, so nothing is written to stderr.

    Returns:
        The configured root logger
    """
    if not os.path.exists(directory):
        os.makedirs(directory)

    handler = logging.FileHandler(os.path.join(directory, filename), encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    # replace a handler from an earlier call instead of stacking them
    for existing in list(root.handlers):
        if getattr(existing, "_logstudio", False):
            root.removeHandler(existing)
            existing.close()
    handler._logstudio = True

    root.addHandler(handler)
    root.setLevel(level)

    # watchdog is chatty at DEBUG
    logging.getLogger("watchdog").setLevel(max(level, logging.INFO))
    return root
