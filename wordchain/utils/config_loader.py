"""
Configuration loading for the word chain tools.

Settings live in YAML files under ``configs/``. An environment specific file
(``wordchain_<environment>.yaml``) wins over the shared ``wordchain.yaml``;
anything neither file sets falls back to ``DEFAULT_CONFIG``.
"""
import os
import copy
import yaml

from wordchain.utils.loggers.json_logger import get_logger

DEFAULT_CONFIG = {
    "order": 2,
    "indent": 4,
    "begin_token": "<s>",
    "end_token": "</s>",
    "max_words": 50,
    "seed": None,
    "lowercase": True,
    "log_file": None,
    "log_level": "INFO",
}


def get_project_root():
    """
    Get the absolute path to the project root directory.

    Returns:
        str: Path to project root directory
    """
    current_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.abspath(os.path.join(current_dir, '..', '..'))


def _read_yaml(config_path, logger):
    """Read one YAML file, returning None when it is absent or unreadable."""
    if not os.path.exists(config_path):
        return None
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Error loading config from {config_path}: {e}")
        return None

    if not isinstance(config, dict):
        logger.warning(f"Ignoring config {config_path}: top level is not a mapping")
        return None

    logger.info(f"Loaded config from {config_path}")
    return config


def load_config(environment="development", config_dir=None, logger=None):
    """
    Load settings for the given environment.

    Args:
        environment (str): Environment name ('development', 'test', 'production')
        config_dir (str, optional): Directory holding the YAML files.
                                    Defaults to ``<project root>/configs``
        logger (Logger, optional): Logger used to report which file was read

    Returns:
        dict: DEFAULT_CONFIG updated with the values found on disk
    """
    if logger is None:
        logger = get_logger("wordchain.config")

    if config_dir is None:
        config_dir = os.path.join(get_project_root(), "configs")

    config = copy.deepcopy(DEFAULT_CONFIG)

    env_config_path = os.path.join(config_dir, f"wordchain_{environment}.yaml")
    default_config_path = os.path.join(config_dir, "wordchain.yaml")

    for config_path in (env_config_path, default_config_path):
        loaded = _read_yaml(config_path, logger)
        if loaded is not None:
            config.update(loaded)
            return config

    logger.warning("No wordchain configuration found, using defaults", extra={
        "metrics": {"environment": environment, "config_dir": config_dir}
    })
    return config
