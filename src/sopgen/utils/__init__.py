"""SOPGen utility modules.

- logging: Standardized logging with human/verbose/JSON modes
"""

from sopgen.utils.logging import LogMode, configure_from_cli, get_logger, setup_logging

__all__ = [
    "LogMode",
    "configure_from_cli",
    "get_logger",
    "setup_logging",
]
