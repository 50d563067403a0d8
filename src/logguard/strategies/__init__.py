"""Logging strategies, selectable by name from the @Commons annotation."""

from typing import Dict, Type

from .base import LoggingStrategy, guard_method_name
from .commons import CommonsLoggingStrategy, LoggerFacadeBinding, facade_binding, reset_facade_binding

# Class-reference spellings from @Commons(loggingStrategy = Commons.CommonsLoggingStrategy)
# parse to dotted names.
STRATEGIES: Dict[str, Type[LoggingStrategy]] = {
    "commons": CommonsLoggingStrategy,
    "CommonsLoggingStrategy": CommonsLoggingStrategy,
    "Commons.CommonsLoggingStrategy": CommonsLoggingStrategy,
    "groovy.util.logging.Commons.CommonsLoggingStrategy": CommonsLoggingStrategy,
}

DEFAULT_STRATEGY = "commons"

__all__ = [
    "LoggingStrategy",
    "CommonsLoggingStrategy",
    "LoggerFacadeBinding",
    "STRATEGIES",
    "DEFAULT_STRATEGY",
    "facade_binding",
    "guard_method_name",
    "reset_facade_binding",
]
