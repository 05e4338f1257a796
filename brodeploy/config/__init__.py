"""
Configuration package for the Brotocol deploy tooling.

Runtime settings, per-network config loading, instantiate message schemas
and logging setup.
"""

from brodeploy.config.settings import (
    DEFAULT_ARTIFACTS_DIR,
    DEFAULT_CONFIG_DIR,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_WASM_DIR,
    LOCALTERRA_MNEMONIC,
    Settings,
    load_env,
)

from brodeploy.config.loader import (
    config_path,
    config_section,
    load_config,
)

from brodeploy.config.logging_config import (
    LOG_DIR,
    get_cli_logger,
    log_deployment,
    setup_deploy_logger,
    setup_logger,
)

__all__ = [
    # Settings
    'DEFAULT_ARTIFACTS_DIR',
    'DEFAULT_CONFIG_DIR',
    'DEFAULT_SETTLE_DELAY',
    'DEFAULT_WASM_DIR',
    'LOCALTERRA_MNEMONIC',
    'Settings',
    'load_env',

    # Config files
    'config_path',
    'config_section',
    'load_config',

    # Logging
    'LOG_DIR',
    'get_cli_logger',
    'log_deployment',
    'setup_deploy_logger',
    'setup_logger',
]
