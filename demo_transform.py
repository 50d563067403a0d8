#!/usr/bin/env python3
"""
Complete Pipeline Demo: Source → Transform → Check → Generate → Run

Shows the full workflow:
1. Parse the example @Commons class
2. Apply the log transformation
3. Type check and analyze the result
4. Generate source
5. Run it with a stand-in logging facade
"""

from logguard.analyzer import analyze_unit, check_types
from logguard.backends import generate_source
from logguard.examples import EXAMPLE_SOURCE
from logguard.interpreter import Runtime, initialize_class, invoke
from logguard.logging_utils import configure_logging
from logguard.parser import parse_source
from logguard.serialization import report_to_yaml
from logguard.strategies.commons import LOGGER_FACTORY_TYPE_NAME, LOGGER_TYPE_NAME
from logguard.transform import LogTransformation
from logguard.typesystem import ClassPath


class PrintingLog:
    """Prints what it logs; debug and info are disabled."""

    ENABLED = {"fatal", "error", "warn"}

    def __getattr__(self, name):
        if name.startswith("is") and name.endswith("Enabled"):
            level = name[2:-len("Enabled")].lower()
            return lambda: level in self.ENABLED
        return lambda *args: print(f"   [{name.upper()}] {' '.join(str(a) for a in args)}")

    def toString(self):
        return "PrintingLog"


class PrintingLogFactory:
    def getLog(self, owner):
        return PrintingLog()


def main():
    configure_logging("INFO")
    classpath = ClassPath([LOGGER_TYPE_NAME, LOGGER_FACTORY_TYPE_NAME])

    print("=" * 80)
    print("PIPELINE DEMO: Source → Transform → Check → Generate → Run")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Parse
    # =========================================================================
    print("\n1. PARSING SOURCE...")
    unit = parse_source(EXAMPLE_SOURCE, unit_name="Example")
    print(f"   ✓ Classes: {[c.name for c in unit.classes]}")

    # =========================================================================
    # STEP 2: Transform
    # =========================================================================
    print("\n2. APPLYING @Commons...")
    report = LogTransformation(classpath=classpath).transform_unit(unit)
    print(report_to_yaml(report))

    # =========================================================================
    # STEP 3: Check
    # =========================================================================
    print("3. TYPE CHECKING...")
    check_types(unit, classpath)
    analysis = analyze_unit(unit, classpath)
    print(f"   ✓ Guarded calls: {analysis.guarded_calls}")
    print(f"   ✓ Unguarded calls: {analysis.unguarded_calls}")

    # =========================================================================
    # STEP 4: Generate
    # =========================================================================
    print("\n4. GENERATED SOURCE\n")
    print(generate_source(unit))

    # =========================================================================
    # STEP 5: Run
    # =========================================================================
    print("5. RUNNING Foo.bar() and Foo.greet(\"ada\") (debug and info disabled)...")
    runtime = Runtime({LOGGER_FACTORY_TYPE_NAME: PrintingLogFactory()})
    foo = initialize_class(unit.get_class("Foo"), runtime)
    invoke(foo, "bar", runtime)
    print(f"   ✓ greet returned {invoke(foo, 'greet', runtime, ['ada'])!r}; no message was built")

    print("\n" + "=" * 80)
    print("✅ PIPELINE COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
