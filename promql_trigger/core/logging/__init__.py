from .logger import (
    clear_reader_path,
    get_logger,
    get_reader_path,
    set_reader_path,
    setup_logging,
)

__all__ = [
    "clear_reader_path",
    "get_logger",
    "get_reader_path",
    "set_reader_path",
    "setup_logging",
]
