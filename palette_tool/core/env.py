"""Environment variable loading and settings for palette-tool.

Load order (first wins):
  1. Existing OS environment variables — never overwrite.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Walking stops at .git so we never load a .env from outside the repo.
Only sets variables that are NOT already in os.environ.

Recognised variables:
  PALETTE_MAX_COLOURS   default palette size for the CLI (int >= 1, default 4)
  PALETTE_LOG_LEVEL     loguru level for the CLI sink (default WARNING)
  PALETTE_LOAD_TIMEOUT  seconds to wait for an image to load (default: forever)
"""

import os
from dataclasses import dataclass
from pathlib import Path

_LOG_LEVELS = {'TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL'}


@dataclass(frozen=True)
class Settings:
    max_colours: int = 4
    log_level: str = 'WARNING'
    load_timeout: float | None = None


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        # .git can be a dir (normal clone) or file (worktree)
        if (current / '.git').exists():
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a .env file into a dict. Handles KEY=value, KEY="value" and export KEY=value."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        if line.startswith('export '):
            line = line[len('export ') :]
        key, _, raw_value = line.partition('=')
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if key:
            result[key] = value
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Load .env into os.environ for keys not already set.

    Returns the path that was loaded, or None if no .env was found/used.
    """
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            return None
    else:
        path = _find_dotenv(Path.cwd())
        if path is None:
            return None

    for key, value in _parse_dotenv(path).items():
        if key not in os.environ:
            os.environ[key] = value

    return path


def _int_var(name: str, default: int) -> int:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {raw!r}') from None
    if value < 1:
        raise ValueError(f'{name} must be >= 1, got {value}')
    return value


def _timeout_var(name: str) -> float | None:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f'{name} must be a number of seconds, got {raw!r}') from None
    if value <= 0:
        raise ValueError(f'{name} must be > 0, got {value}')
    return value


def read_settings() -> Settings:
    """Build Settings from os.environ. Raises ValueError naming a bad variable."""
    level = os.environ.get('PALETTE_LOG_LEVEL', '').strip().upper() or 'WARNING'
    if level not in _LOG_LEVELS:
        raise ValueError(f'PALETTE_LOG_LEVEL must be one of {", ".join(sorted(_LOG_LEVELS))}, got {level!r}')
    return Settings(
        max_colours=_int_var('PALETTE_MAX_COLOURS', 4),
        log_level=level,
        load_timeout=_timeout_var('PALETTE_LOAD_TIMEOUT'),
    )
