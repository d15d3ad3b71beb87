"""
Project layout

Explicit, immutable description of where generated and shared files live.
Built once from a project root and a Config, then passed to every lifecycle
operation.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Type, Union

from crudgen.config import Config
from crudgen.model import ModelDescriptor


@dataclass(frozen=True)
class GeneratedFiles:
    """Absolute paths of the three per-model files."""

    routes: Path
    controller: Path
    query: Path

    def as_tuple(self) -> Tuple[Path, Path, Path]:
        return (self.routes, self.controller, self.query)


@dataclass(frozen=True)
class ProjectLayout:
    """Absolute project paths resolved against a root directory."""

    root: Path
    routes_dir: Path
    controllers_dir: Path
    queries_dir: Path
    pool_file: Path
    db_registry: Path
    route_registry: Path
    api_prefix: str = "/api"
    create_pool: bool = True

    def __post_init__(self):
        if not isinstance(self.api_prefix, str):
            raise ValueError(
                f"API_PREFIX must be a string such as '/api', got {self.api_prefix!r}"
            )

    @classmethod
    def from_config(
        cls,
        root: Union[str, Path, None] = None,
        config: Optional[Type[Config]] = None
    ) -> "ProjectLayout":
        """
        Resolve the configured layout against a project root.

        Args:
            root: Project root (defaults to the current directory)
            config: Config class to read Layout and API_PREFIX from
        """
        config = config or Config
        root = Path(root if root is not None else Path.cwd()).resolve()
        layout = config.Layout

        return cls(
            root=root,
            routes_dir=root / layout.ROUTES_DIR,
            controllers_dir=root / layout.CONTROLLERS_DIR,
            queries_dir=root / layout.QUERIES_DIR,
            pool_file=root / layout.POOL_FILE,
            db_registry=root / layout.DB_REGISTRY,
            route_registry=root / layout.ROUTE_REGISTRY,
            api_prefix=config.API_PREFIX,
            create_pool=bool(config.CREATE_POOL),
        )

    def files_for(self, model: ModelDescriptor) -> GeneratedFiles:
        """Per-model file paths, derived deterministically from the descriptor."""
        return GeneratedFiles(
            routes=self.routes_dir / f"{model.plural_name}.js",
            controller=self.controllers_dir / f"{model.name}Controller.js",
            query=self.queries_dir / f"{model.name}.js",
        )

    @staticmethod
    def import_path(source: Path, target: Path) -> str:
        """
        ES module specifier for importing `target` from within `source`.

        Examples:
            src/db/db.js -> src/db/queries/author.js  =>  ./queries/author.js
            src/routes/authors.js -> src/controllers/authorController.js
                =>  ../controllers/authorController.js
        """
        specifier = Path(os.path.relpath(target, source.parent)).as_posix()
        return specifier if specifier.startswith('.') else f"./{specifier}"

    def relative(self, path: Path) -> str:
        """Path relative to the project root, for display."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return str(path)
