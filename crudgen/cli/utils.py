"""
crudgen CLI - Utilities

Progress, error handling and result display for CLI commands.
"""

import click
from contextlib import contextmanager
from pathlib import Path


@contextmanager
def progress_step(message: str):
    """
    Context manager for a single progress step.

    Usage:
        with progress_step("Generating CRUD files"):
            create_model(model, layout)
    """
    click.secho(f"  [....] {message}", fg='blue', nl=False)
    try:
        yield
        click.echo('\r', nl=False)
        click.secho(f"  [ OK ] {message}", fg='green')
    except Exception:
        click.echo('\r', nl=False)
        click.secho(f"  [FAIL] {message}", fg='red')
        raise


class CLIError(Exception):
    """
    Custom exception for CLI errors with actionable suggestions.

    Attributes:
        message: Error message
        suggestion: Actionable suggestion for the user
        error_code: Optional error code for documentation reference
    """

    def __init__(self, message: str, suggestion: str = None, error_code: str = None):
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        super().__init__(message)


class FileConflictError(CLIError):
    """A per-model file already exists; create refuses to overwrite it."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"File already exists: {path}",
            suggestion="Remove the model first with 'crud-gen remove <model>' "
                       "or choose a different model name.",
            error_code="C001"
        )


def handle_error(error: Exception, context: str = None):
    """
    Handle errors with improved formatting and suggestions.

    Args:
        error: The exception that occurred
        context: Optional context about what operation failed
    """
    click.echo(err=True)

    if isinstance(error, CLIError):
        if error.error_code:
            click.secho(f"[ERROR {error.error_code}] ", fg='red', bold=True, nl=False, err=True)
        else:
            click.secho("[ERROR] ", fg='red', bold=True, nl=False, err=True)

        click.secho(error.message, fg='red', err=True)

        if error.suggestion:
            click.secho("\n[TIP] ", fg='yellow', bold=True, nl=False, err=True)
            click.secho(error.suggestion, fg='yellow', err=True)

    elif isinstance(error, PermissionError):
        click.secho("[ERROR] ", fg='red', bold=True, nl=False, err=True)
        click.secho(f"Permission denied: {error.filename or error}", fg='red', err=True)
        click.secho("\n[TIP] ", fg='yellow', bold=True, nl=False, err=True)
        click.secho("Check file permissions or run with appropriate privileges.", fg='yellow', err=True)

    else:
        click.secho("[ERROR] ", fg='red', bold=True, nl=False, err=True)
        if context:
            click.secho(f"{context}: {error}", fg='red', err=True)
        else:
            click.secho(str(error), fg='red', err=True)

    click.echo(err=True)


def success_message(message: str, details: dict = None):
    """
    Display a success message with optional details.

    Args:
        message: Main success message
        details: Optional dict of key-value details to display
    """
    click.echo()
    click.secho("=" * 50, fg='green', bold=True)
    click.secho(f"[SUCCESS] {message}", fg='green', bold=True)
    click.secho("=" * 50, fg='green', bold=True)

    if details:
        click.echo()
        for key, value in details.items():
            click.secho(f"  {key}: ", fg='blue', nl=False)
            click.secho(str(value), fg='cyan')

    click.echo()


def next_steps(steps: list, title: str = "Next Steps"):
    """
    Display next steps for the user.

    Args:
        steps: List of step strings
        title: Section title
    """
    click.echo()
    click.secho(f"{title}:", fg='yellow', bold=True)

    for i, step in enumerate(steps, 1):
        click.secho(f"  {i}. ", fg='yellow', nl=False)
        click.secho(step, fg='cyan')

    click.echo()
