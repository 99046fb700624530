"""Utility modules for Site Companion.

This package provides logging, text normalization and interval scheduling helpers.
"""

from utils.interval_timer import IntervalTimer
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["IntervalTimer", "LoggerUtils", "StringUtils"]
