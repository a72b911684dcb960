"""Centralized path management for pt.

Everything pt keeps on disk lives under the per-user config directory
(``$XDG_CONFIG_HOME/pt`` or ``~/.config/pt``):
- config.yml      - user configuration (ignored assignees, branch prefix)
- token           - optional GitHub token (falls back to ``gh auth token``)
- debug/pt.log    - command log
- debug-enabled   - marker file; when present, logging runs at DEBUG
"""

import logging
import os
import shlex
from pathlib import Path


def config_home() -> Path:
    """Return the base config directory ($XDG_CONFIG_HOME or ~/.config)."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path(os.environ.get("HOME") or Path.home()) / ".config"


def pt_home() -> Path:
    """Return the pt config directory (does not create it)."""
    return config_home() / "pt"


def config_file() -> Path:
    return pt_home() / "config.yml"


def token_file() -> Path:
    return pt_home() / "token"


def debug_dir() -> Path:
    """Return the debug/logs directory, creating it if needed."""
    d = pt_home() / "debug"
    d.mkdir(parents=True, exist_ok=True)
    return d


def command_log_file() -> Path:
    return debug_dir() / "pt.log"


def debug_enabled() -> bool:
    """Check for the ``debug-enabled`` marker file in the pt directory."""
    return (pt_home() / "debug-enabled").exists()


def configure_logger(name: str, max_bytes: int = 10_000_000) -> logging.Logger:
    """Configure a logger that writes to the rotating command log.

    Args:
        name: Logger name (e.g., "pt"; children such as "pt.git" propagate to it)
        max_bytes: Maximum log file size before rotation (default 10MB)

    Returns:
        Configured logger instance
    """
    from logging.handlers import RotatingFileHandler

    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    try:
        handler = RotatingFileHandler(
            command_log_file(),
            maxBytes=max_bytes,
            backupCount=1,
        )
    except OSError:
        # Config dir not writable: log nowhere
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return logger

    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)
    return logger


_shell_log = logging.getLogger("pt.shell")


def log_shell_command(cmd: list[str] | str, prefix: str = "shell", returncode: int | None = None) -> None:
    """Log a shell command to the central command log.

    All external commands (git, fzf, gh, the editor) go through here.

    Args:
        cmd: Command list or string to log
        prefix: Prefix for the log entry (e.g., "git", "fzf")
        returncode: If provided, logs as completion with return code
    """
    cmd_str = shlex.join(cmd) if isinstance(cmd, list) else cmd

    if returncode is None:
        _shell_log.info("%s: %s", prefix, cmd_str)
    elif returncode == 0:
        _shell_log.info("%s done: %s", prefix, cmd_str)
    else:
        _shell_log.warning("%s failed (rc=%d): %s", prefix, returncode, cmd_str)
