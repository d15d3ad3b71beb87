"""
crudgen CLI Commands - Modular Structure

One module per command.
"""

from crudgen.cli.commands.create_command import create
from crudgen.cli.commands.remove_command import remove

__all__ = [
    "create",
    "remove",
]
