"""
Run configuration: command-line values first, then environment variables
(a .env file in the working directory is honoured), then defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .api.clients import CLIENTS
from .core.file_operations import OutputMode
from .core.life_list import DEFAULT_LIFE_LIST_FILE
from .core.preview import DEFAULT_PREVIEW_SIZE
from .core.routing import DEFAULT_CONFIDENCE_THRESHOLD


class ConfigError(ValueError):
    """Raised when the run configuration is invalid."""


@dataclass
class RunConfig:
    target_dir: Path
    mode: OutputMode
    api: str = "openai"
    tier1_model: Optional[str] = None
    tier2_model: Optional[str] = None
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    life_list_path: Path = DEFAULT_LIFE_LIST_FILE

    # Flush the life list after every N photos with birds (0 = only at the end)
    persist_every: int = 0
    preview_size: int = DEFAULT_PREVIEW_SIZE
    retries: int = 0
    report: bool = True
    debug: bool = False


def _pick(cli_value: Any, env: Mapping[str, str], env_key: str, default: Any = None) -> Any:
    if cli_value is not None:
        return cli_value
    value = env.get(env_key)
    return value if value not in (None, "") else default


def load_config(args: Any, env: Optional[Mapping[str, str]] = None) -> RunConfig:
    """Build and validate a RunConfig from parsed CLI args and the environment.

    Raises:
        ConfigError: If a required value is missing or invalid.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    target = _pick(getattr(args, "target_directory", None), env, "TARGET_DIRECTORY")
    if not target:
        raise ConfigError("target_directory is missing")
    target_dir = Path(target).expanduser()
    if not target_dir.is_dir():
        raise ConfigError(f"target_directory does not exist: {target_dir}")

    mode_value = _pick(getattr(args, "mode", None), env, "EXECUTION_MODE")
    try:
        mode = OutputMode.parse(mode_value)
    except ValueError:
        raise ConfigError(f"execution mode must be 'organize' or 'tag' (alias 'xmp'), got {mode_value!r}") from None

    api = str(_pick(getattr(args, "api", None), env, "VISION_API", "openai")).lower()
    if api not in CLIENTS:
        raise ConfigError(f"Unsupported API: {api} (choose from {', '.join(CLIENTS)})")

    threshold = float(_pick(getattr(args, "threshold", None), env, "CONFIDENCE_THRESHOLD", DEFAULT_CONFIDENCE_THRESHOLD))
    if not 0.0 <= threshold <= 1.0:
        raise ConfigError(f"threshold must be between 0 and 1, got {threshold}")

    persist_every = int(_pick(getattr(args, "persist_every", None), env, "PERSIST_EVERY", 0))
    retries = int(_pick(getattr(args, "retries", None), env, "CLASSIFY_RETRIES", 0))
    if persist_every < 0 or retries < 0:
        raise ConfigError("persist_every and retries must not be negative")

    return RunConfig(
        target_dir=target_dir,
        mode=mode,
        api=api,
        tier1_model=_pick(getattr(args, "tier1_model", None), env, "TIER1_MODEL"),
        tier2_model=_pick(getattr(args, "tier2_model", None), env, "TIER2_MODEL"),
        threshold=threshold,
        life_list_path=Path(_pick(getattr(args, "life_list", None), env, "LIFE_LIST_PATH", DEFAULT_LIFE_LIST_FILE)).expanduser(),
        persist_every=persist_every,
        preview_size=int(_pick(getattr(args, "preview_size", None), env, "PREVIEW_SIZE", DEFAULT_PREVIEW_SIZE)),
        retries=retries,
        report=not getattr(args, "no_report", False),
        debug=bool(getattr(args, "debug", False)),
    )
