import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from expense_categorizer.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "HOST",
    "PORT",
    "CONFIDENCE_THRESHOLD",
    "FUZZY_MATCH_THRESHOLD",
    "MAX_ALTERNATIVES",
    "RULES_PATH",
    "DESCRIPTION_KEYWORDS_PATH",
)

_config_file_path: str | None = None


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    return find_dotenv(usecwd=True) or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    nested = os.path.join(os.getcwd(), "config", CONFIG_FILENAME)
    if os.path.exists(nested):
        return nested
    return os.path.join(os.getcwd(), CONFIG_FILENAME)


def read_config_file(path: str | None) -> dict[str, str]:
    """
    Read flat ``KEY: value`` lines. Blank lines and ``#`` comments are skipped
    and surrounding quotes are removed from values.
    """
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = (part.strip() for part in stripped.split(":", 1))
            if raw_value.startswith(("'", '"')):
                quote = raw_value[0]
                end = raw_value.find(quote, 1)
                value = raw_value[1:end] if end > 0 else raw_value[1:]
            else:
                value = raw_value.split(" #", 1)[0].strip()
            if key and value:
                values[key] = value
    return values


def load_environment() -> None:
    """Populate os.environ from .env and the config file without overriding."""
    global _config_file_path

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _config_file_path = _resolve_config_path()
    file_values = read_config_file(_config_file_path)
    for key in _CONFIG_KEYS:
        if key not in os.environ and key in file_values:
            os.environ[key] = file_values[key]


def get_config_path() -> str | None:
    return _config_file_path


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_ratio(name: str, default: float) -> float:
    """Read a float in [0, 1]; out-of-range values are clamped."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if not 0.0 <= value <= 1.0:
        clamped = min(max(value, 0.0), 1.0)
        logger.warning("[ENV] %s='%s' outside [0, 1], clamped to %s.", name, raw, clamped)
        return clamped
    return value


def get_env_path(name: str) -> str | None:
    return os.getenv(name) or None


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables.")
    for key in _CONFIG_KEYS:
        value = os.getenv(key)
        logger.info("[ENV] %s=%s", key, "<unset>" if value is None else value)


@dataclass(frozen=True)
class PredictorSettings:
    """Calibrated thresholds for the prediction engine."""

    confidence_threshold: float = 0.55
    fuzzy_match_threshold: float = 0.6
    fuzzy_discount: float = 0.85
    max_alternatives: int = 3
    generic_min_confidence: float = 0.4
    generic_alternative_floor: float = 0.2
    empty_input_confidence: float = 0.1

    @classmethod
    def from_env(cls) -> "PredictorSettings":
        defaults = cls()
        return cls(
            confidence_threshold=get_env_ratio(
                "CONFIDENCE_THRESHOLD", defaults.confidence_threshold
            ),
            fuzzy_match_threshold=get_env_ratio(
                "FUZZY_MATCH_THRESHOLD", defaults.fuzzy_match_threshold
            ),
            max_alternatives=get_env_int(
                "MAX_ALTERNATIVES", defaults.max_alternatives, min_value=1
            ),
        )


load_environment()
