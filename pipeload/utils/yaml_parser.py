"""YAML parsing utilities for pipeload.

This module provides functions for loading and validating export job
YAML files.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from pipeload.exceptions import ValidationError
from pipeload.models.job import ExportJob

# ${VAR_NAME} or ${VAR_NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def substitute_env_vars(data: Any) -> Any:
    """Recursively substitute environment variables in data structure.

    Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.

    Args:
        data: Data structure (dict, list, str, etc.)

    Returns:
        Data with environment variables substituted

    Raises:
        ValidationError: If a variable is unset and has no default

    Examples:
        >>> os.environ['NZ_HOST'] = 'nz-host'
        >>> substitute_env_vars('netezza+nzpy://admin@${NZ_HOST}:5480/sales')
        'netezza+nzpy://admin@nz-host:5480/sales'
        >>> substitute_env_vars('${MISSING:-default_value}')
        'default_value'
    """
    if isinstance(data, dict):
        return {k: substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replace_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            value = os.environ.get(var_name)
            if value is not None:
                return value
            if default_value is None:
                raise ValidationError(
                    f"Environment variable '{var_name}' not found and no default provided"
                )
            return default_value

        return ENV_VAR_PATTERN.sub(replace_var, data)
    else:
        return data


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file into a dictionary with environment variable substitution.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary with YAML contents and environment variables substituted

    Raises:
        ValidationError: If file cannot be read or parsed, or required env vars are missing
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ValidationError(f"File not found: {path}") from e
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ValidationError(f"Failed to load {path}: {e}") from e

    if data is None:
        raise ValidationError(f"Empty YAML file: {path}")
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a mapping at the top of {path}, got {type(data).__name__}")
    return substitute_env_vars(data)


def load_job(path: Path) -> ExportJob:
    """Load and validate an export job from a YAML file.

    Args:
        path: Path to job YAML file

    Returns:
        Validated ExportJob object

    Raises:
        ValidationError: If the job is invalid
    """
    data = load_yaml(path)
    try:
        return ExportJob(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid job in {path}: {e}") from e
