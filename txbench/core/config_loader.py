"""Run configuration loading."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import aiofiles

from .errors import ConfigurationError
from .models import RunConfig

# Defaults from the reference benchmark script
RUN_DEFAULTS: Dict[str, Any] = {
    "transaction_count": 200,
    "batch_size": 5,
    "worker_index": 0,
    "total_workers": 1,
    "progress_interval": 50,
}

logger = logging.getLogger(__name__)


def build_run_config(values: Dict[str, Any]) -> RunConfig:
    """
    Apply defaults to `values` and build a validated RunConfig.

    Keys set to None are treated as absent.

    Raises:
        ConfigurationError: On unknown keys or invalid values
    """
    merged = dict(RUN_DEFAULTS)
    merged.update({k: v for k, v in values.items() if v is not None})

    known = set(RunConfig.__dataclass_fields__)
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    return RunConfig(**merged)


async def load_run_config(
    path: Optional[Union[str, Path]] = None, **overrides: Any
) -> RunConfig:
    """
    Load a run configuration from a JSON file.

    Args:
        path: JSON file holding an object of RunConfig fields (optional)
        **overrides: Values that take precedence over the file, e.g. CLI flags

    Returns:
        Validated RunConfig

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    values: Dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file '{config_path}' does not exist")

        async with aiofiles.open(config_path, "r") as f:
            content = await f.read()
        try:
            values = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file '{config_path}' is not valid JSON: {e}")
        if not isinstance(values, dict):
            raise ConfigurationError(f"Config file '{config_path}' must hold a JSON object")
        logger.info(f"Loaded run configuration from {config_path}")

    values.update({k: v for k, v in overrides.items() if v is not None})
    return build_run_config(values)
