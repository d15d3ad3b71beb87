"""
crudgen Configuration

Central configuration for the crudgen CLI.
"""

import os
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class Config:
    """
    Generator configuration settings.

    Organized into:
    - Layout: project-relative paths the generator reads and writes
    - User Settings: configurable via CRUDGEN_* environment variables
    """

    class Layout:
        """
        Project directory layout.

        Every path is relative to the project root. The per-model file names
        are derived from the model descriptor, the directories come from here.
        """
        ROUTES_DIR = "src/routes"
        CONTROLLERS_DIR = "src/controllers"
        QUERIES_DIR = "src/db/queries"
        POOL_FILE = "src/db/pool.js"
        DB_REGISTRY = "src/db/db.js"
        ROUTE_REGISTRY = "src/routes/index.js"

    # Environment variable prefix for load_from_env()
    ENV_PREFIX = "CRUDGEN_"

    # Logging
    LOG_LEVEL = "WARNING"
    VERBOSE_LOGGING = False

    # Generation
    API_PREFIX = "/api"  # Mount prefix used in generated route registrations
    CREATE_POOL = True  # Write src/db/pool.js on first create if missing

    @classmethod
    def load_from_env(cls, environ: Optional[dict] = None):
        """
        Load configuration from CRUDGEN_* environment variables.

        Layout entries are addressed as CRUDGEN_LAYOUT_<NAME>, e.g.
        CRUDGEN_LAYOUT_ROUTES_DIR=app/routes.

        Example:
            CRUDGEN_LOG_LEVEL=DEBUG
            CRUDGEN_CREATE_POOL=false
            CRUDGEN_LAYOUT_QUERIES_DIR=src/queries

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        environ = os.environ if environ is None else environ
        layout_prefix = cls.ENV_PREFIX + "LAYOUT_"

        # Subclasses get their own Layout so overrides don't leak into Config
        if 'Layout' not in cls.__dict__:
            cls.Layout = type('Layout', (cls.Layout,), {})

        for key, raw_value in environ.items():
            if not key.startswith(cls.ENV_PREFIX):
                continue

            if key.startswith(layout_prefix):
                attr_name = key[len(layout_prefix):]
                if not hasattr(cls.Layout, attr_name):
                    logger.warning(f"Unknown layout setting ignored: {key}")
                    continue
                # Layout values are always paths, never auto-typed
                setattr(cls.Layout, attr_name, raw_value.strip().strip('/'))
                continue

            attr_name = key[len(cls.ENV_PREFIX):]
            if attr_name == "LAYOUT" or not attr_name.isupper():
                continue

            if attr_name in STRING_SETTINGS:
                value = raw_value.strip()
            else:
                value = _auto_detect(raw_value)
            if attr_name == "LOG_LEVEL":
                value = str(value).upper()
                if value not in VALID_LOG_LEVELS:
                    logger.warning(f"Invalid log level '{raw_value}', keeping {cls.LOG_LEVEL}")
                    continue

            setattr(cls, attr_name, value)
            if cls.VERBOSE_LOGGING:
                logger.info(f"Loaded {attr_name} from environment")

    @classmethod
    def to_dict(cls) -> dict:
        """Return user settings and layout as a flat dict (for display)."""
        settings = {
            name: getattr(cls, name)
            for name in dir(cls)
            if name.isupper() and not name.startswith('_')
        }
        for name in dir(cls.Layout):
            if name.isupper():
                settings[f"LAYOUT_{name}"] = getattr(cls.Layout, name)
        return settings


VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

# Settings taken verbatim from the environment, never auto-typed
STRING_SETTINGS = {'API_PREFIX', 'LOG_LEVEL'}


def _auto_detect(env_value: str) -> Any:
    """Auto-detect the type of an environment value."""
    value = env_value.strip()

    if value.lower() in ('null', 'none', '~', ''):
        return None

    if value.lower() in ('true', 'false', 'yes', 'no', 'on', 'off'):
        return value.lower() in ('true', 'yes', 'on')

    if value.lstrip('-').isdigit():
        return int(value)

    if ',' in value:
        return _parse_list(value)

    return value


def _parse_list(value: str) -> List[str]:
    """Parse comma-separated list from string"""
    return [item.strip() for item in str(value).split(',') if item.strip()]
