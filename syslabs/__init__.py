"""Computer-systems lab tools: reporting, checked allocation, a command console, bit puzzles and a cache simulator."""

__version__ = "0.1.0"

__all__ = [
    "report",
    "harness",
    "console",
    "bits",
    "reference",
    "cachelab",
    "cachesim",
    "transpose",
]