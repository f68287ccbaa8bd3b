"""
cmdfy - natural language to shell commands

A CLI tool that turns a plain-English request into a shell pipeline using
one (or all) of several Large Language Model providers.
"""
__version__ = "0.2.0"
__description__ = "AI-enabled shell command generator"


from cmdfy.config import Config

__all__ = [
    "__version__",
    "__description__",
    "Config",
]
