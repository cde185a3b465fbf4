# src/common/__init__.py
"""
Общие утилиты, константы и логгер.
"""

from src.common.logger import get_logger, setup_logging, log_info, log_error, log_warning, log_debug
from src.common.constants import SERVICE_NAME, TypeMsg

__all__ = [
    "get_logger",
    "setup_logging",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "SERVICE_NAME",
    "TypeMsg",
]
