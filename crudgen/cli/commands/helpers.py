"""
crudgen CLI - Shared Helper Functions

Click callbacks and prompts used across CLI commands.
"""

import click
import questionary
from questionary import Style
from pathlib import Path
from typing import List, Optional, Tuple

from crudgen.config import Config
from crudgen.layout import ProjectLayout
from crudgen.model import Field, validate_model_name

# Custom style for questionary prompts
custom_style = Style([
    ('qmark', 'fg:#673ab7 bold'),          # Question mark
    ('question', 'bold'),                   # Question text
    ('answer', 'fg:#2196f3 bold'),         # Selected answer
    ('pointer', 'fg:#673ab7 bold'),        # Selection pointer
    ('highlighted', 'fg:#2196f3 bold'),    # Highlighted choice
    ('instruction', ''),                    # Instructions
    ('text', ''),                           # Plain text
])


def validate_model_name_param(ctx, param, value):
    """
    Validate the model name argument for Click commands.

    Raises:
        click.BadParameter: If the name is not a valid model name
    """
    try:
        validate_model_name((value or "").strip())
    except ValueError as e:
        raise click.BadParameter(str(e))
    return value.strip()


def validate_field_specs(ctx, param, value) -> Tuple[str, ...]:
    """
    Validate `name:type` field arguments for Click commands.

    Raises:
        click.BadParameter: On a malformed or duplicate field
    """
    seen = set()
    for spec in value:
        try:
            field = Field.parse(spec)
        except ValueError as e:
            raise click.BadParameter(str(e))
        if field.name in seen:
            raise click.BadParameter(f"Duplicate field name: '{field.name}'")
        seen.add(field.name)
    return tuple(value)


def validate_fields_realtime(text: str):
    """
    Real-time validation for the interactive field prompt.

    Returns:
        True if valid, error message string if invalid
    """
    specs = split_field_specs(text)
    if not specs:
        return "Enter at least one field (e.g., name:string age:int)"
    try:
        validate_field_specs(None, None, specs)
    except click.BadParameter as e:
        return e.message
    return True


def split_field_specs(text: str) -> List[str]:
    """Split prompt input on whitespace and commas."""
    return [spec for spec in text.replace(',', ' ').split() if spec]


def prompt_for_fields(display_name: str) -> List[str]:
    """
    Ask for field specs interactively.

    Returns:
        List of `name:type` specs; empty if the prompt was aborted
    """
    answer = questionary.text(
        f"Fields for {display_name} (name:type, separated by spaces):",
        validate=validate_fields_realtime,
        style=custom_style
    ).ask()
    return split_field_specs(answer or "")


def resolve_layout(root: Optional[str]) -> ProjectLayout:
    """Build the project layout from --root (or the current directory)."""
    return ProjectLayout.from_config(Path(root) if root else Path.cwd(), Config)


def print_paths(label: str, paths, layout: ProjectLayout, color: str):
    """Print one line per path, relative to the project root."""
    for path in paths:
        click.secho(f"  {label} ", fg=color, bold=True, nl=False)
        click.secho(layout.relative(path), fg='cyan')
