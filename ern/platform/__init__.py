"""Platform abstraction layer."""

from .files import atomic_write_text
from .paths import home, user_config_dir
from .process import ProcessError, run

__all__ = [
    # files
    "atomic_write_text",
    # paths
    "home",
    "user_config_dir",
    # process
    "ProcessError",
    "run",
]
