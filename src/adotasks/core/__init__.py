"""
Core module - Pure domain logic with no network dependencies.

This module contains:
- domain/: Work item entities and enums
- ports/: Abstract interfaces that adapters must implement
- security/: Secret redaction for logs
- exceptions: Centralized exception hierarchy
"""

from .domain import *  # noqa: F403
from .exceptions import *  # noqa: F403
from .ports import *  # noqa: F403
