"""
Tests for the Commons Logging strategy.

Verifies that the strategy:
    - Adds `private static final transient Log log = LogFactory.getLog(Foo)`
    - Recognizes exactly the six level methods
    - Wraps a call as `log.isXEnabled() ? call : null`
    - Binds the facade once, with placeholders when it is missing
"""

import logging
import threading

import pytest

from logguard.errors import PreconditionError
from logguard.expressions import (
    NULL,
    ArgumentListExpression,
    BooleanExpression,
    ClassExpression,
    ConstantExpression,
    MethodCallExpression,
    TernaryExpression,
    VariableExpression,
)
from logguard.model import ClassNode, FieldNode, Modifier
from logguard.strategies import (
    CommonsLoggingStrategy,
    LoggerFacadeBinding,
    facade_binding,
    guard_method_name,
    reset_facade_binding,
)
from logguard.strategies.commons import (
    LOGGER_FACTORY_TYPE_NAME,
    LOGGER_TYPE_NAME,
    resolve_facade_binding,
)
from logguard.typesystem import ClassPath, TypeDescriptor


@pytest.fixture
def strategy(facade_classpath):
    return CommonsLoggingStrategy(resolve_facade_binding(facade_classpath))


class TestAddLoggerField:
    def test_field_shape(self, strategy):
        foo = ClassNode(name="Foo")
        field = strategy.add_logger_field_to_class(foo, "log")

        assert foo.get_field("log") is field
        assert field.modifiers == Modifier.PRIVATE | Modifier.STATIC | Modifier.FINAL | Modifier.TRANSIENT
        assert field.type == TypeDescriptor(LOGGER_TYPE_NAME, resolved=True)
        assert field.owner == "Foo"

    def test_initializer_calls_factory_with_class(self, strategy):
        foo = ClassNode(name="com.acme.Foo")
        field = strategy.add_logger_field_to_class(foo, "logger")

        assert field.name == "logger"
        assert field.initial_expression == MethodCallExpression(
            ClassExpression(TypeDescriptor(LOGGER_FACTORY_TYPE_NAME, resolved=True)),
            "getLog",
            ArgumentListExpression((ClassExpression(TypeDescriptor("com.acme.Foo", resolved=True)),)),
        )

    def test_field_is_first(self, strategy):
        foo = ClassNode(name="Foo", fields=[FieldNode(name="count", owner="Foo")])
        strategy.add_logger_field_to_class(foo, "log")
        assert [f.name for f in foo.fields] == ["log", "count"]


class TestIsLoggingMethod:
    @pytest.mark.parametrize("name", ["fatal", "error", "warn", "info", "debug", "trace"])
    def test_levels(self, strategy, name):
        assert strategy.is_logging_method(name)

    @pytest.mark.parametrize("name", ["", "Debug", "DEBUG", "toString", "isDebugEnabled", "warning", "log"])
    def test_everything_else(self, strategy, name):
        assert not strategy.is_logging_method(name)


class TestWrapLoggingMethodCall:
    def test_guard_shape(self, strategy):
        log = VariableExpression("log")
        call = MethodCallExpression(log, "debug", ArgumentListExpression((ConstantExpression("hi"),)))

        wrapped = strategy.wrap_logging_method_call(log, "debug", call)

        assert wrapped == TernaryExpression(
            BooleanExpression(MethodCallExpression(log, "isDebugEnabled")),
            call,
            NULL,
        )

    def test_true_branch_is_original_node(self, strategy):
        log = VariableExpression("log")
        call = MethodCallExpression(log, "trace")
        wrapped = strategy.wrap_logging_method_call(log, "trace", call)
        assert wrapped.true_expression is call
        assert wrapped.boolean_expression.expression.object_expression is log

    def test_empty_method_name_rejected(self, strategy):
        log = VariableExpression("log")
        with pytest.raises(PreconditionError):
            strategy.wrap_logging_method_call(log, "", MethodCallExpression(log, ""))


@pytest.mark.parametrize(
    "method,expected",
    [
        ("debug", "isDebugEnabled"),
        ("trace", "isTraceEnabled"),
        ("fatal", "isFatalEnabled"),
        ("x", "isXEnabled"),
    ],
)
def test_guard_method_name(method, expected):
    assert guard_method_name(method) == expected


def test_guard_method_name_is_a_value_error():
    with pytest.raises(ValueError):
        guard_method_name("")


class TestFacadeBinding:
    def test_resolved_binding(self, facade_classpath):
        binding = resolve_facade_binding(facade_classpath)
        assert binding.resolved
        assert binding.logger_type.name == LOGGER_TYPE_NAME

    def test_missing_facade_falls_back_to_placeholders(self, caplog):
        with caplog.at_level(logging.WARNING, logger="logguard"):
            binding = resolve_facade_binding(ClassPath())

        assert not binding.resolved
        assert binding.logger_type == TypeDescriptor(LOGGER_TYPE_NAME, resolved=False)
        assert binding.factory_type == TypeDescriptor(LOGGER_FACTORY_TYPE_NAME, resolved=False)
        assert "Commons Logging not found" in caplog.text

    def test_missing_facade_still_adds_field(self):
        strategy = CommonsLoggingStrategy(resolve_facade_binding(ClassPath()))
        foo = ClassNode(name="Foo")
        field = strategy.add_logger_field_to_class(foo, "log")
        assert field.type.name == LOGGER_TYPE_NAME
        assert not field.type.resolved

    def test_resolved_once(self, facade_classpath):
        first = facade_binding(facade_classpath)
        second = facade_binding(ClassPath())
        assert second is first
        assert second.resolved

    def test_reset(self, facade_classpath):
        facade_binding(ClassPath())
        reset_facade_binding()
        assert facade_binding(facade_classpath).resolved

    def test_default_ignores_configuration_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOGGUARD_CONFIG", str(tmp_path / "missing.yaml"))
        strategy = CommonsLoggingStrategy()
        assert not strategy.binding.resolved

    def test_concurrent_first_use_sees_one_binding(self, facade_classpath):
        results = []

        def use():
            results.append(facade_binding(facade_classpath))

        threads = [threading.Thread(target=use) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(r is results[0] for r in results)

    def test_explicit_binding_wins(self):
        binding = LoggerFacadeBinding(
            TypeDescriptor("my.Log", resolved=True), TypeDescriptor("my.LogFactory", resolved=True)
        )
        strategy = CommonsLoggingStrategy(binding)
        field = strategy.add_logger_field_to_class(ClassNode(name="Foo"), "log")
        assert field.type.name == "my.Log"
