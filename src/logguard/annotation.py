"""
The @Commons annotation.

Placed on a class declaration, it asks the transformation to add a
Commons Logging logger field and to guard every logging call made on it:

    @Commons
    class Foo {
        def bar() { log.debug("hi") }
    }

Members:
    value            Logger field name (default "log")
    loggingStrategy  Strategy name or class reference from
                     logguard.strategies.STRATEGIES (default "commons")

Retention is source only: the transformation removes the annotation
from the class once it has been applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Type, Union

from logguard.errors import InvalidAnnotationError, StrategyInstantiationError
from logguard.model import AnnotationNode
from logguard.strategies import DEFAULT_STRATEGY, STRATEGIES, LoggingStrategy

ANNOTATION_NAME = "Commons"
QUALIFIED_ANNOTATION_NAME = "groovy.util.logging.Commons"
ANNOTATION_NAMES = (ANNOTATION_NAME, QUALIFIED_ANNOTATION_NAME)

DEFAULT_FIELD_NAME = "log"

StrategySpec = Union[str, Type[LoggingStrategy]]


@dataclass(frozen=True)
class LoggingConfiguration:
    """
    Configuration read from one @Commons annotation.

    strategy is either a registry name or a LoggingStrategy subclass;
    the engine turns it into an instance.
    """

    field_name: str = DEFAULT_FIELD_NAME
    strategy: StrategySpec = DEFAULT_STRATEGY


def is_logging_annotation(annotation: AnnotationNode) -> bool:
    return annotation.name in ANNOTATION_NAMES


def configuration_from_annotation(annotation: AnnotationNode, class_name: str) -> LoggingConfiguration:
    """
    Read the annotation's members.

    Raises:
        InvalidAnnotationError: On unknown members or wrongly typed values
    """
    unknown = set(annotation.members) - {"value", "loggingStrategy"}
    if unknown:
        raise InvalidAnnotationError(class_name, f"unknown @{ANNOTATION_NAME} members: {sorted(unknown)}")

    field_name = annotation.get_member("value", DEFAULT_FIELD_NAME)
    if not isinstance(field_name, str) or not field_name.isidentifier():
        raise InvalidAnnotationError(class_name, f"logger field name must be an identifier, got {field_name!r}")

    strategy = annotation.get_member("loggingStrategy", DEFAULT_STRATEGY)
    if not isinstance(strategy, str):
        raise InvalidAnnotationError(class_name, f"loggingStrategy must be a strategy name, got {strategy!r}")

    return LoggingConfiguration(field_name=field_name, strategy=strategy)


def instantiate_strategy(config: LoggingConfiguration, class_name: str) -> LoggingStrategy:
    """
    Build the strategy named by config.

    Raises:
        StrategyInstantiationError: Unknown name, a class that does not
            implement LoggingStrategy, or a no-argument constructor that raises
    """
    spec = config.strategy
    if isinstance(spec, str):
        strategy_cls = STRATEGIES.get(spec)
        if strategy_cls is None:
            raise StrategyInstantiationError(
                class_name, spec, f"unknown strategy, expected one of {sorted(STRATEGIES)}"
            )
    else:
        strategy_cls = spec

    if not isinstance(strategy_cls, type) or not issubclass(strategy_cls, LoggingStrategy):
        raise StrategyInstantiationError(class_name, spec, "not a LoggingStrategy subclass")

    try:
        return strategy_cls()
    except Exception as e:
        raise StrategyInstantiationError(class_name, spec, str(e) or type(e).__name__) from e
