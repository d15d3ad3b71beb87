"""
crudgen CLI - Model Scaffolding

Creates and removes the generated files of a model and keeps the two
aggregator files in sync. Nothing here prints; commands report from the
returned ScaffoldResult.
"""

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from crudgen._template_loader import render_template
from crudgen.aggregator import patch_db_registry, patch_route_registry
from crudgen.layout import GeneratedFiles, ProjectLayout
from crudgen.logging import get_logger
from crudgen.model import ModelDescriptor
from .utils import CLIError, FileConflictError

logger = get_logger(__name__)

# Receives the question, returns True to proceed
ConfirmCallback = Callable[[str], bool]


@dataclass
class ScaffoldResult:
    """Files touched by a create or remove run."""

    model: ModelDescriptor
    created: List[Path] = field(default_factory=list)
    updated: List[Path] = field(default_factory=list)
    deleted: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    planned: List[Path] = field(default_factory=list)
    cancelled: bool = False
    dry_run: bool = False


def check_conflicts(files: GeneratedFiles):
    """Raise FileConflictError for the first per-model file that already exists."""
    for path in files.as_tuple():
        if path.exists():
            raise FileConflictError(path)


def render_model_files(model: ModelDescriptor, layout: ProjectLayout) -> Dict[Path, str]:
    """Render the query module, controller and router, keyed by target path."""
    files = layout.files_for(model)
    names = model.field_names
    context = {
        "model": model,
        "columns": ", ".join(names),
        "placeholders": ", ".join(f"${i}" for i in range(1, len(names) + 1)),
        "assignments": ", ".join(f"{name} = ${i}" for i, name in enumerate(names, 1)),
        "id_placeholder": f"${len(names) + 1}",
        "pool_import": layout.import_path(files.query, layout.pool_file),
        "db_import": layout.import_path(files.controller, layout.db_registry),
        "controller_import": layout.import_path(files.routes, files.controller),
    }

    return {
        files.query: render_template("query.js.j2", **context),
        files.controller: render_template("controller.js.j2", **context),
        files.routes: render_template("routes.js.j2", **context),
    }


def write_text_atomic(path: Path, content: str):
    """Write through a temp file and an atomic replace. Line endings are written as given."""
    temp_file = path.with_name(path.name + ".tmp")
    try:
        with open(temp_file, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        temp_file.replace(path)
    except Exception:
        if temp_file.exists():
            temp_file.unlink()
        raise


def patch_file(path: Path, patch: Callable[[str], str], create_missing: bool) -> Optional[bool]:
    """
    Apply a text patch to a file.

    Returns:
        True if the file was written, False if the patch changed nothing,
        None if the file is missing and create_missing is False.
    """
    if path.exists():
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
    elif create_missing:
        logger.debug(f"{path} missing, creating from scratch")
        text = ""
    else:
        return None

    new_text = patch(text)
    if path.exists() and new_text == text:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    write_text_atomic(path, new_text)
    return True


def _registry_dir(layout: ProjectLayout, registry: Path, target_dir: Path) -> str:
    """Module specifier of `target_dir` as seen from `registry` (e.g. ./queries)."""
    return posixpath.dirname(layout.import_path(registry, target_dir / "_.js"))


def _patch_registries(model: ModelDescriptor, layout: ProjectLayout,
                      result: ScaffoldResult, present: bool):
    queries_path = _registry_dir(layout, layout.db_registry, layout.queries_dir)
    routes_path = _registry_dir(layout, layout.route_registry, layout.routes_dir)

    patches = [
        (layout.db_registry,
         lambda text: patch_db_registry(text, model, present, queries_path=queries_path)),
        (layout.route_registry,
         lambda text: patch_route_registry(text, model, present, routes_path=routes_path,
                                           api_prefix=layout.api_prefix)),
    ]

    for path, patch in patches:
        written = patch_file(path, patch, create_missing=present)
        if written is None:
            logger.debug(f"{path} not found, nothing to unregister")
            result.skipped.append(path)
        elif written:
            result.updated.append(path)


def create_model(model: ModelDescriptor, layout: ProjectLayout,
                 dry_run: bool = False) -> ScaffoldResult:
    """
    Generate the per-model files and register the model.

    Raises:
        CLIError: If the model has no fields
        FileConflictError: If any per-model file already exists
    """
    if not model.fields:
        raise CLIError(
            f"No fields given for model '{model.display_name}'",
            suggestion=f"Pass fields as name:type, e.g. "
                       f"'crud-gen create {model.name} name:string age:int'",
            error_code="C002"
        )

    files = layout.files_for(model)
    check_conflicts(files)

    rendered = render_model_files(model, layout)
    write_pool = layout.create_pool and not layout.pool_file.exists()
    result = ScaffoldResult(model=model, dry_run=dry_run)

    if dry_run:
        if write_pool:
            result.planned.append(layout.pool_file)
        result.planned.extend(rendered)
        result.planned.extend([layout.db_registry, layout.route_registry])
        return result

    for directory in (files.routes.parent, files.controller.parent,
                      files.query.parent, layout.pool_file.parent):
        directory.mkdir(parents=True, exist_ok=True)

    if write_pool:
        layout.pool_file.write_text(render_template("pool.js.j2"), encoding="utf-8")
        result.created.append(layout.pool_file)

    for path, content in rendered.items():
        path.write_text(content, encoding="utf-8")
        result.created.append(path)
        logger.debug(f"Created {path}")

    _patch_registries(model, layout, result, present=True)
    return result


def remove_model(model: ModelDescriptor, layout: ProjectLayout,
                 confirm: ConfirmCallback) -> ScaffoldResult:
    """
    Delete the per-model files and unregister the model.

    `confirm` is asked once; declining returns a cancelled result and
    leaves every file untouched. Missing files are reported as skipped.
    """
    result = ScaffoldResult(model=model)

    question = f'Are you sure you want to delete model "{model.display_name}" and all related files?'
    if not confirm(question):
        result.cancelled = True
        return result

    files = layout.files_for(model)
    for path in (files.routes, files.controller, files.query):
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"{path} not found, skipping")
            result.skipped.append(path)
        else:
            result.deleted.append(path)

    _patch_registries(model, layout, result, present=False)
    return result
