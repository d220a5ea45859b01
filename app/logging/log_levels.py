"""
Custom log levels
"""
from enum import Enum


class LogLevel(str, Enum):
    """Custom log levels"""
    WARNING = "warning"
    INFO = "info"
    REQUEST = "request"
    ERROR = "error"
    SLOW = "slow"
    GREAT = "great"
