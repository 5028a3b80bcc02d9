"""XDG-compliant path management for mole.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/mole/
- State: ~/.local/state/mole/
"""

import logging
import os
import pwd
from pathlib import Path

logger = logging.getLogger(__name__)

# Application identifier for directory naming
APP_NAME = "mole"


def invoking_home() -> Path:
    """Get the home directory of the user who invoked mole.

    Under ``sudo`` the effective user is root, but whitelist patterns
    such as ``~/Documents`` refer to the invoking user's home, which is
    looked up from ``SUDO_USER``.

    Returns:
        Home directory of the invoking user.
    """
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user and os.geteuid() == 0:
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            logger.warning("SUDO_USER %r has no passwd entry, using %s", sudo_user, Path.home())
    return Path.home()


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return invoking_home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/mole/ (or XDG_CONFIG_HOME/mole/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data holds the deletion history.

    Returns:
        Path to ~/.local/state/mole/ (or XDG_STATE_HOME/mole/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to ~/.config/mole/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_whitelist_path() -> Path:
    """Get the user whitelist file path.

    Returns:
        Path to ~/.config/mole/whitelist.
    """
    return get_config_dir() / "whitelist"


def get_history_path() -> Path:
    """Get the history file path.

    Returns:
        Path to ~/.local/state/mole/history.jsonl.
    """
    return get_state_dir() / "history.jsonl"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Returns:
        Path to the state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")
