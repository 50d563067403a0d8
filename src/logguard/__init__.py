"""
LogGuard Package

Compile-time logging support for a Groovy-like language model.

A class annotated with @Commons gets a private static final Commons
Logging logger field, and every logging call made on it is rewritten
so the message is only built when the level is enabled:

    log.debug(msg)   ->   log.isDebugEnabled() ? log.debug(msg) : null

Layers:
    parser          source text -> CompilationUnit
    transform       applies @Commons through a LoggingStrategy
    analyzer        type checking and read-only reports
    backends        CompilationUnit -> source text
    interpreter     runs the model against Python objects
"""

__version__ = "0.1.0"
