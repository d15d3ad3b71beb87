"""
crudgen CLI - Create Command

Generates the route, controller and query files for a model and registers
it in src/db/db.js and src/routes/index.js.
"""

import click
import sys

from crudgen.model import ModelDescriptor
from ..scaffold import create_model
from ..utils import CLIError, handle_error, progress_step, success_message, next_steps
from .helpers import (
    validate_model_name_param, validate_field_specs, prompt_for_fields,
    resolve_layout, print_paths,
)


@click.command()
@click.argument('model_name', callback=validate_model_name_param)
@click.argument('fields', nargs=-1, callback=validate_field_specs)
@click.option('--dry-run', is_flag=True, default=False,
              help='Preview changes without creating files')
@click.option('--interactive', '-i', is_flag=True, default=False,
              help='Prompt for fields when none are given')
@click.option('--root', default=None, type=click.Path(file_okay=False),
              help='Project root (defaults to the current directory)')
def create(model_name, fields, dry_run, interactive, root):
    """
    Generate CRUD files for a model.

    FIELDS are name:type pairs; the type defaults to "string".

    Examples:
        crud-gen create author name:string age:int
        crud-gen create book title isbn:string --dry-run
        crud-gen create post --interactive
    """
    try:
        if not fields and interactive:
            fields = prompt_for_fields(model_name[0].upper() + model_name[1:])

        model = ModelDescriptor.from_input(model_name, fields)
        layout = resolve_layout(root)

        action = "Planning" if dry_run else "Generating"
        with progress_step(f"{action} CRUD files for {model.display_name}"):
            result = create_model(model, layout, dry_run=dry_run)

        if result.dry_run:
            click.secho("\n[DRY-RUN] Preview of changes (no files will be written):", fg='yellow', bold=True)
            click.secho("=" * 50, fg='yellow')
            print_paths("Would write:", result.planned, layout, 'yellow')
            click.secho(f"  Fields: {', '.join(model.field_names)}", fg='magenta')
            click.secho("\n[TIP] Remove --dry-run flag to create files.", fg='blue')
            click.echo()
            return

        click.echo()
        print_paths("[OK] Created", result.created, layout, 'green')
        print_paths("[OK] Updated", result.updated, layout, 'blue')

        success_message(
            f'CRUD for model "{model.display_name}" generated successfully!',
            {
                "Table": model.table_name,
                "Fields": ", ".join(f"{f.name}:{f.type}" for f in model.fields),
                "Route": f"{layout.api_prefix}/:apiV/{model.plural_name}",
            }
        )
        next_steps([
            f"Create the '{model.table_name}' table in your database",
            "Call registerRoutes(app, apiV) from your Express app",
        ])

    except CLIError as e:
        handle_error(e)
        sys.exit(1)
    except ValueError as e:
        handle_error(CLIError(str(e), error_code="C003"))
        sys.exit(1)
    except Exception as e:
        handle_error(e, context="Failed to generate CRUD files")
        sys.exit(1)
