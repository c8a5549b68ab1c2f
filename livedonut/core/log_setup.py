import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - [%(levelname)s] - (%(filename)s:%(lineno)d) - %(message)s"

def get_log_directory(app_name: str) -> str:
    """Returns the per-platform data directory used for the log file."""
    if sys.platform == "win32":
        base_dir = os.getenv("APPDATA") or os.path.expanduser("~")
        return os.path.join(base_dir, app_name)

    if sys.platform == "darwin":
        return os.path.join(
            os.path.expanduser("~/Library/Application Support"), app_name
        )

    xdg_data_home = os.getenv("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    return os.path.join(xdg_data_home, app_name)

def is_debug_requested(debug_env_var: str = "DEBUG") -> bool:
    return os.environ.get(debug_env_var, "false").lower() in ("true", "1", "yes")

def setup_logging(app_name: str, debug_enabled: bool = False, debug_env_var: str = None):
    """
    Configures the root logger with a stdout handler and a log file.

    Args:
        app_name: Application name, used for the log directory
        debug_enabled: Whether to log at DEBUG level
        debug_env_var: Environment variable that also turns debug on
    """
    if debug_env_var and is_debug_requested(debug_env_var):
        debug_enabled = True

    level = logging.DEBUG if debug_enabled else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if debug_enabled:
        try:
            log_dir = get_log_directory(app_name)
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(
                os.path.join(log_dir, "log.txt"), mode="w", encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError:
            root_logger.error(
                "Failed to set up file logger. Continuing with console-only logging.",
                exc_info=True,
            )

    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PyQt6").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)

    return level
