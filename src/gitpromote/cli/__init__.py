"""
gitpromote CLI package.

Commands are auto-discovered from ``gitpromote.cli.commands``: each module
exposes ``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
"""
from ._output import OutputFormatter
from ._args import add_json_flag, add_repo_root_flag

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_repo_root_flag",
]
