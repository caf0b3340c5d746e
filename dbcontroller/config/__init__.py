"""
Configuration helpers.

Example:

    from dbcontroller.config import config_from_env
    db = DBController(config_from_env())
"""

from .env import (  # noqa: F401
    ENV_PREFIX,
    OPTIONAL_KEYS,
    REQUIRED_KEYS,
    config_from_env,
    debug_from_env,
    load_config,
    validate_config,
)
