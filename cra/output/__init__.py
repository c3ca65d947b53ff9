"""Console output and error presentation."""

from cra.output.console import ConsoleProtocol, MockConsole, RichConsole, Style

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
]
