"""
Tests for the log transformation engine.

Tests verify that the engine:
    - Adds the logger field and guards logging calls end to end
    - Leaves non-logging calls, other receivers and shadowed names alone
    - Rejects a class that already declares the logger field
    - Does not guard a call twice
    - Reports what it did
"""

import logging

import pytest

from logguard.config import TransformConfig
from logguard.errors import DuplicateFieldError, StrategyInstantiationError, TransformationError
from logguard.examples import EXAMPLE_SOURCE
from logguard.expressions import (
    NULL,
    ArgumentListExpression,
    BooleanExpression,
    ConstantExpression,
    MethodCallExpression,
    TernaryExpression,
    VariableExpression,
)
from logguard.model import Modifier
from logguard.parser import parse_source
from logguard.strategies.commons import LOGGER_FACTORY_TYPE_NAME, LOGGER_TYPE_NAME
from logguard.transform import LogTransformation, transform_unit
from logguard.typesystem import ClassPath


def guarded(receiver, method, *arguments):
    call = MethodCallExpression(VariableExpression(receiver), method, ArgumentListExpression(tuple(arguments)))
    condition = MethodCallExpression(
        VariableExpression(receiver), "is" + method.capitalize() + "Enabled"
    )
    return TernaryExpression(BooleanExpression(condition), call, NULL)


@pytest.fixture
def engine(facade_classpath):
    return LogTransformation(classpath=facade_classpath)


class TestEndToEnd:
    def test_example_class(self, engine):
        unit = parse_source(EXAMPLE_SOURCE)
        report = engine.transform_unit(unit)
        foo = unit.get_class("Foo")

        log_field = foo.fields[0]
        assert log_field.name == "log"
        assert log_field.modifiers == Modifier.PRIVATE | Modifier.STATIC | Modifier.FINAL | Modifier.TRANSIENT
        assert log_field.type.name == LOGGER_TYPE_NAME
        assert log_field.type.resolved
        assert log_field.initial_expression.method == "getLog"
        assert log_field.initial_expression.object_expression.type.name == LOGGER_FACTORY_TYPE_NAME

        bar = foo.get_method("bar")
        assert bar.body[0].expression == guarded("log", "debug", ConstantExpression("hi"))
        assert bar.body[1].expression == MethodCallExpression(VariableExpression("log"), "toString")

        assert foo.annotations == []

        class_report = report.get_class_report("Foo")
        assert class_report.wrapped_calls == 2
        assert class_report.untouched_calls == 1
        assert report.total_wrapped_calls == 2

    def test_argument_expression_is_kept(self, engine):
        unit = parse_source(EXAMPLE_SOURCE)
        engine.transform_unit(unit)
        greet = unit.get_class("Foo").get_method("greet")

        ternary = greet.body[0].expression
        assert isinstance(ternary, TernaryExpression)
        assert ternary.true_expression.arguments.arguments[0] == MethodCallExpression(
            ConstantExpression("hello "), "concat", ArgumentListExpression((VariableExpression("name"),))
        )
        assert greet.body[1].expression == VariableExpression("name")

    @pytest.mark.parametrize("level", ["fatal", "error", "warn", "info", "debug", "trace"])
    def test_every_level_is_guarded(self, engine, level):
        unit = parse_source(f'@Commons class Foo {{ def m() {{ log.{level}("x") }} }}')
        engine.transform_unit(unit)
        expr = unit.get_class("Foo").get_method("m").body[0].expression
        assert expr == guarded("log", level, ConstantExpression("x"))

    def test_qualified_annotation_name(self, engine):
        unit = parse_source('@groovy.util.logging.Commons class Foo { def m() { log.info("x") } }')
        report = engine.transform_unit(unit)
        assert report.total_wrapped_calls == 1

    def test_custom_field_name(self, engine):
        unit = parse_source(
            '@Commons("logger") class Foo { def m() { logger.info("a")\n log.info("b") } }'
        )
        report = engine.transform_unit(unit)
        foo = unit.get_class("Foo")

        assert foo.fields[0].name == "logger"
        body = foo.get_method("m").body
        assert body[0].expression == guarded("logger", "info", ConstantExpression("a"))
        assert body[1].expression == MethodCallExpression(
            VariableExpression("log"), "info", ArgumentListExpression((ConstantExpression("b"),))
        )
        assert report.get_class_report("Foo").field_name == "logger"


class TestLeftAlone:
    def test_unannotated_class(self, engine):
        unit = parse_source('class Foo { def m() { log.info("x") } }')
        report = engine.transform_unit(unit)

        foo = unit.get_class("Foo")
        assert foo.fields == []
        assert isinstance(foo.get_method("m").body[0].expression, MethodCallExpression)
        assert report.classes == []

    def test_other_receivers(self, engine):
        unit = parse_source('@Commons class Foo { def m(other) { other.debug("x")\n log.name.debug("y") } }')
        report = engine.transform_unit(unit)
        body = unit.get_class("Foo").get_method("m").body
        assert all(isinstance(s.expression, MethodCallExpression) for s in body)
        assert report.total_wrapped_calls == 0

    def test_parameter_shadows_logger(self, engine):
        unit = parse_source(
            '@Commons class Foo { def m(log) { log.debug("x") }\n def n() { log.debug("y") } }'
        )
        report = engine.transform_unit(unit)
        foo = unit.get_class("Foo")

        assert isinstance(foo.get_method("m").body[0].expression, MethodCallExpression)
        assert isinstance(foo.get_method("n").body[0].expression, TernaryExpression)
        assert report.get_class_report("Foo").shadowed_methods == ["m"]

    def test_existing_guard_not_wrapped_again(self, engine):
        source = '@Commons class Foo { def m() { log.isDebugEnabled() ? log.debug("x") : null } }'
        unit = parse_source(source)
        original = unit.get_class("Foo").get_method("m").body[0]

        report = engine.transform_unit(unit)

        assert unit.get_class("Foo").get_method("m").body[0] is original
        class_report = report.get_class_report("Foo")
        assert class_report.already_guarded_calls == 1
        assert class_report.wrapped_calls == 0

    def test_guard_for_another_level_is_not_a_guard(self, engine):
        unit = parse_source('@Commons class Foo { def m() { log.isInfoEnabled() ? log.debug("x") : null } }')
        report = engine.transform_unit(unit)
        ternary = unit.get_class("Foo").get_method("m").body[0].expression
        assert ternary.true_expression == guarded("log", "debug", ConstantExpression("x"))
        assert report.get_class_report("Foo").wrapped_calls == 1

    def test_second_run_is_a_no_op(self, engine):
        unit = parse_source(EXAMPLE_SOURCE)
        engine.transform_unit(unit)
        foo = unit.get_class("Foo")
        body = list(foo.get_method("bar").body)

        report = engine.transform_unit(unit)

        assert report.classes == []
        assert foo.get_method("bar").body == body
        assert len(foo.fields) == 1


class TestNesting:
    def test_nested_logging_calls(self, engine):
        unit = parse_source('@Commons class Foo { def m(h) { log.info(h.describe(log.debug("x"))) } }')
        report = engine.transform_unit(unit)

        outer = unit.get_class("Foo").get_method("m").body[0].expression
        assert isinstance(outer, TernaryExpression)
        describe = outer.true_expression.arguments.arguments[0]
        assert describe.arguments.arguments[0] == guarded("log", "debug", ConstantExpression("x"))
        assert report.total_wrapped_calls == 2

    def test_return_statement(self, engine):
        unit = parse_source('@Commons class Foo { def m() { return log.warn("x") } }')
        engine.transform_unit(unit)
        statement = unit.get_class("Foo").get_method("m").body[0]
        assert statement.expression == guarded("log", "warn", ConstantExpression("x"))
        assert type(statement).__name__ == "ReturnStatement"

    def test_field_initializer(self, engine):
        unit = parse_source('@Commons class Foo { def banner = log.info("starting") }')
        engine.transform_unit(unit)
        foo = unit.get_class("Foo")
        assert [f.name for f in foo.fields] == ["log", "banner"]
        assert foo.get_field("banner").initial_expression == guarded("log", "info", ConstantExpression("starting"))


class TestSimpleArguments:
    def test_wrapped_by_default(self, engine):
        unit = parse_source('@Commons class Foo { def m(x) { log.debug("hi")\n log.debug(x) } }')
        report = engine.transform_unit(unit)
        assert report.total_wrapped_calls == 2

    def test_skipped_when_configured(self, facade_classpath):
        engine = LogTransformation(classpath=facade_classpath, skip_simple_arguments=True)
        unit = parse_source(EXAMPLE_SOURCE)
        report = engine.transform_unit(unit)

        foo = unit.get_class("Foo")
        assert isinstance(foo.get_method("bar").body[0].expression, MethodCallExpression)
        assert isinstance(foo.get_method("greet").body[0].expression, TernaryExpression)
        class_report = report.get_class_report("Foo")
        assert class_report.skipped_simple_calls == 1
        assert class_report.wrapped_calls == 1


class TestErrors:
    def test_duplicate_field(self, engine):
        unit = parse_source('@Commons class Foo { def log = null\n def m() { log.info("x") } }')

        with pytest.raises(DuplicateFieldError) as excinfo:
            engine.transform_unit(unit)

        assert excinfo.value.field_name == "log"
        assert "cannot declare a field named 'log'" in str(excinfo.value)
        foo = unit.get_class("Foo")
        assert len(foo.fields) == 1
        assert isinstance(foo.get_method("m").body[0].expression, MethodCallExpression)

    def test_duplicate_custom_field(self, engine):
        unit = parse_source('@Commons("logger") class Foo { def logger = null }')
        with pytest.raises(TransformationError, match="logger"):
            engine.transform_unit(unit)

    def test_unknown_strategy(self, engine):
        unit = parse_source('@Commons(loggingStrategy = "log4j") class Foo { }')
        with pytest.raises(StrategyInstantiationError):
            engine.transform_unit(unit)


class TestFacade:
    def test_missing_facade_still_transforms(self):
        unit = parse_source(EXAMPLE_SOURCE)
        report = LogTransformation(classpath=ClassPath()).transform_unit(unit)

        log_field = unit.get_class("Foo").fields[0]
        assert log_field.type.name == LOGGER_TYPE_NAME
        assert not log_field.type.resolved
        assert report.total_wrapped_calls == 2

    def test_logs_each_class(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="logguard"):
            engine.transform_unit(parse_source(EXAMPLE_SOURCE))
        assert "Added logger field 'log' to Foo, guarded 2 call(s)" in caplog.text


def test_transform_unit_with_config():
    config = TransformConfig(classpath=(LOGGER_TYPE_NAME, LOGGER_FACTORY_TYPE_NAME))
    unit = parse_source(EXAMPLE_SOURCE)
    report = transform_unit(unit, config)
    assert report.total_wrapped_calls == 2
    assert unit.get_class("Foo").fields[0].type.resolved


def test_report_strategy_name(engine):
    report = engine.transform_unit(parse_source(EXAMPLE_SOURCE))
    assert report.get_class_report("Foo").strategy == "CommonsLoggingStrategy"
    assert report.get_class_report("Bar") is None


class TestTransformClass:
    def test_uses_engine_classpath(self, facade_classpath):
        foo = parse_source(EXAMPLE_SOURCE).get_class("Foo")
        report = LogTransformation(classpath=facade_classpath).transform_class(foo)

        assert report.wrapped_calls == 2
        assert foo.fields[0].type.resolved

    def test_bad_configuration_file_is_not_read(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOGGUARD_CONFIG", str(tmp_path / "missing.yaml"))
        foo = parse_source(EXAMPLE_SOURCE).get_class("Foo")
        LogTransformation().transform_class(foo)

        assert foo.fields[0].name == "log"
        assert not foo.fields[0].type.resolved
