"""
Example compilation unit built in code.

build_example_unit() returns what the parser produces for EXAMPLE_SOURCE.
"""
from logguard.expressions import (
    ArgumentListExpression,
    ConstantExpression,
    MethodCallExpression,
    VariableExpression,
)
from logguard.model import (
    AnnotationNode,
    ClassNode,
    CompilationUnit,
    ExpressionStatement,
    MethodNode,
    Parameter,
    ReturnStatement,
)

EXAMPLE_SOURCE = """\
@Commons
class Foo {
    def bar() {
        log.debug("hi")
        log.toString()
    }

    def greet(name) {
        log.info("hello ".concat(name))
        return name
    }
}
"""


def build_example_unit(field_name: str = "log") -> CompilationUnit:
    """Build the Foo unit; field_name sets @Commons' value when not "log"."""
    annotation = AnnotationNode(name="Commons")
    if field_name != "log":
        annotation.members["value"] = field_name

    def call(method: str, *arguments) -> MethodCallExpression:
        return MethodCallExpression(VariableExpression(field_name), method, ArgumentListExpression(tuple(arguments)))

    bar = MethodNode(
        name="bar",
        body=[
            ExpressionStatement(call("debug", ConstantExpression("hi"))),
            ExpressionStatement(call("toString")),
        ],
    )
    greet = MethodNode(
        name="greet",
        parameters=[Parameter("name")],
        body=[
            ExpressionStatement(
                call(
                    "info",
                    MethodCallExpression(
                        ConstantExpression("hello "),
                        "concat",
                        ArgumentListExpression((VariableExpression("name"),)),
                    ),
                )
            ),
            ReturnStatement(VariableExpression("name")),
        ],
    )

    foo = ClassNode(name="Foo", annotations=[annotation], methods=[bar, greet])
    return CompilationUnit(name="Example", classes=[foo])
