"""
crudgen CLI - Remove Command

Deletes the generated files of a model and unregisters it from the
aggregator files.
"""

import click
import sys

from crudgen.model import ModelDescriptor
from ..scaffold import remove_model
from ..utils import CLIError, handle_error, success_message
from .helpers import validate_model_name_param, resolve_layout, print_paths


def confirm_with_click(question: str) -> bool:
    """
    Blocking y/N prompt on stdin.

    Only "y" or "yes" proceeds. Any other answer, an empty line, EOF or
    Ctrl+C declines without asking again.
    """
    try:
        answer = click.prompt(f"{question} [y/N]", default="", show_default=False)
    except click.Abort:
        click.echo()
        return False
    return answer.strip().lower() in ("y", "yes")


@click.command()
@click.argument('model_name', callback=validate_model_name_param)
@click.option('--yes', '-y', is_flag=True, default=False,
              help='Skip the confirmation prompt')
@click.option('--root', default=None, type=click.Path(file_okay=False),
              help='Project root (defaults to the current directory)')
def remove(model_name, yes, root):
    """
    Remove generated CRUD files and references for a model.

    Examples:
        crud-gen remove author
        crud-gen remove author --yes
    """
    try:
        model = ModelDescriptor.from_input(model_name)
        layout = resolve_layout(root)

        confirm = (lambda question: True) if yes else confirm_with_click
        result = remove_model(model, layout, confirm)

        if result.cancelled:
            click.secho("[CANCELLED] No files were changed.", fg='yellow')
            return

        click.echo()
        print_paths("[OK] Deleted", result.deleted, layout, 'green')
        print_paths("[OK] Updated", result.updated, layout, 'blue')
        print_paths("[WARN] Not found (skipped):", result.skipped, layout, 'yellow')

        success_message(
            f'Model "{model.display_name}" and related files removed.',
            {
                "Files deleted": len(result.deleted),
                "Files skipped": len(result.skipped),
            }
        )

    except CLIError as e:
        handle_error(e)
        sys.exit(1)
    except ValueError as e:
        handle_error(CLIError(str(e), error_code="C003"))
        sys.exit(1)
    except Exception as e:
        handle_error(e, context="Failed to remove model")
        sys.exit(1)
