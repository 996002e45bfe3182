#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import toml
import yaml

from .domain import RepositoryInfoOptions, BranchOptions, CIBranchVersionMode, PossibleVersionsMode
from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("gitcsemver")

CONFIG_BASENAME = "gitcsemver"
CONFIG_SUFFIXES = ('.json', '.toml', '.yaml', '.yml')
TRUE_VALUES = ('true', 'yes', 'on')
FALSE_VALUES = ('false', 'no', 'off')


def get_config_path(root: Optional[str] = None) -> Optional[Path]:
    """Get the path to the options file of a repository.

    Checks in order:
    1. GITCSEMVER_CONFIG environment variable
    2. gitcsemver.{json,toml,yaml,yml} at the repository root
    3. .gitcsemver.{json,toml,yaml,yml} at the repository root

    Returns None when there is no options file.
    """
    if 'GITCSEMVER_CONFIG' in os.environ:
        path = Path(os.environ['GITCSEMVER_CONFIG'])
        if path.exists():
            return path
        logger.warning(f"GITCSEMVER_CONFIG points to a missing file: {path}")

    if root is None:
        return None
    for prefix in ('', '.'):
        for suffix in CONFIG_SUFFIXES:
            path = Path(root) / f"{prefix}{CONFIG_BASENAME}{suffix}"
            if path.exists():
                return path
    return None


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """Read one options file, choosing the loader by suffix."""
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(root: Optional[str] = None) -> Dict[str, Any]:
    """Load the options of a repository: defaults, then file, then environment."""
    config = get_default_config()

    config_path = get_config_path(root)
    if config_path is not None:
        try:
            file_config = read_config_file(config_path)
            if not isinstance(file_config, dict):
                raise ValueError("the top level must be a mapping")
            config = merge_configs(config, file_config)
            logger.debug(f"Options read from {config_path}")
        except (OSError, ValueError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def save_config(config: Dict[str, Any], config_path: Path) -> Path:
    """Save options to a file, choosing the writer by suffix."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = _drop_none(config)

    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'w') as f:
            toml.dump(data, f)
    elif suffix in ('.yaml', '.yml'):
        with open(config_path, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    else:
        with open(config_path, 'w') as f:
            json.dump(data, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def _drop_none(value: Any) -> Any:
    # TOML has no null.
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "starting_version_for_csemver": None,
        "starting_branch_name": None,
        "starting_commit_sha": None,
        "single_major": None,
        "only_patch": False,
        "possible_versions_mode": PossibleVersionsMode.RESTRICTED.value,
        "ignore_dirty_working_folder": False,
        "ignore_modified_files": [],
        "remote_name": "origin",
        "branches": [],
        "overridden_tags": {},
        "check_existing_versions": True,
    }


def get_example_config() -> Dict[str, Any]:
    """Default configuration with a typical branch setup, for 'config init'."""
    config = get_default_config()
    config["branches"] = [
        {"name": "develop", "ci_version_mode": CIBranchVersionMode.LAST_RELEASE_BASED.value},
        {"name": "master", "ci_version_mode": CIBranchVersionMode.NONE.value},
    ]
    return config


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GITCSEMVER_KEY
    For example: GITCSEMVER_IGNORE_DIRTY_WORKING_FOLDER=true
    """
    env_prefix = "GITCSEMVER_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue
        key = env_key[len(env_prefix):].lower()
        if key not in config or isinstance(config[key], (dict, list)):
            continue

        if value.lower() in TRUE_VALUES:
            typed_value = True
        elif value.lower() in FALSE_VALUES:
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value
        config[key] = typed_value

    return config


def options_from_config(config: Dict[str, Any]) -> RepositoryInfoOptions:
    """
    Build RepositoryInfoOptions from a configuration dictionary.

    Raises:
        ConfigError: On unknown modes or values of the wrong type
    """
    try:
        branches = [BranchOptions.from_dict(b) for b in config.get("branches") or []]
    except (KeyError, TypeError) as e:
        raise ConfigError(f"Invalid branches: each branch needs a name ({e}).")
    except ValueError as e:
        raise ConfigError(str(e))

    try:
        mode = PossibleVersionsMode.parse(config.get("possible_versions_mode") or "")
    except ValueError as e:
        raise ConfigError(str(e))

    single_major = config.get("single_major")
    if single_major is not None and (isinstance(single_major, bool) or not isinstance(single_major, int)):
        raise ConfigError(f"single_major must be an integer, got {single_major!r}.")

    overridden = config.get("overridden_tags") or {}
    if not isinstance(overridden, dict):
        raise ConfigError("overridden_tags must map commit shas (or 'head') to lists of tags.")

    return RepositoryInfoOptions(
        starting_commit_sha=_optional_str(config, "starting_commit_sha"),
        starting_branch_name=_optional_str(config, "starting_branch_name"),
        starting_version_for_csemver=_optional_str(config, "starting_version_for_csemver"),
        single_major=single_major,
        only_patch=_bool_option(config, "only_patch", False),
        possible_versions_mode=mode,
        ignore_dirty_working_folder=_bool_option(config, "ignore_dirty_working_folder", False),
        ignore_modified_files=set(config.get("ignore_modified_files") or []),
        remote_name=config.get("remote_name") or "origin",
        branches=branches,
        overridden_tags={str(k): [str(t) for t in (v or [])] for k, v in overridden.items()},
        check_existing_versions=_bool_option(config, "check_existing_versions", True),
    )


def _optional_str(config: Dict[str, Any], key: str) -> Optional[str]:
    value = config.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _bool_option(config: Dict[str, Any], key: str, default: bool) -> bool:
    value = config.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    # GITCSEMVER_<KEY>=1 arrives as an int
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        if value.lower() in TRUE_VALUES:
            return True
        if value.lower() in FALSE_VALUES:
            return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}.")
