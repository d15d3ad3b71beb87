"""
crudgen - CRUD scaffolding for Express + PostgreSQL projects

Generates a route file, a controller and a query module for a named model,
and keeps the two shared aggregator files (src/db/db.js and
src/routes/index.js) in sync.

Quick Start:
    $ crud-gen create author name:string age:int
    $ crud-gen remove author

Programmatic use:
    from crudgen import ModelDescriptor, ProjectLayout
    from crudgen.cli.scaffold import create_model

    model = ModelDescriptor.from_input("author", ["name:string", "age:int"])
    create_model(model, ProjectLayout.from_config("."))
"""

from crudgen.config import Config
from crudgen.layout import ProjectLayout, GeneratedFiles
from crudgen.model import ModelDescriptor, Field
from crudgen.aggregator import DbRegistry, RouteRegistry

__version__ = "1.0.0"

__all__ = [
    "Config",
    "ProjectLayout",
    "GeneratedFiles",
    "ModelDescriptor",
    "Field",
    "DbRegistry",
    "RouteRegistry",
]
