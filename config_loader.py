import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Union

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.txt")

DEFAULT_START_SECONDS = 10
DEFAULT_LIMIT_SECONDS = 10
FIELD_COUNT = 6


@dataclass(frozen=True)
class TimerConfig:
    """Settings read once at startup."""

    start_seconds: int = DEFAULT_START_SECONDS
    limit_seconds: int = DEFAULT_LIMIT_SECONDS
    sound_zero_path: str = ""
    sound_limit_path: str = ""


def meaningful_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield lines with comments stripped, skipping blank ones."""
    for line in lines:
        clean = line.split("#", 1)[0].strip()
        if clean:
            yield clean


def _parse_int(value: str, field: str) -> int:
    if not value:
        return 0
    digits = value[1:] if value[0] in "+-" else value
    if not (digits.isascii() and digits.isdigit()):
        logger.debug("Ignoring malformed %s value %r", field, value)
        return 0
    return int(value, 10)


def parse_config(text: str) -> TimerConfig:
    fields = list(meaningful_lines(text.splitlines()))[:FIELD_COUNT]
    fields += [""] * (FIELD_COUNT - len(fields))
    start_min, start_sec, limit_min, limit_sec, sound_zero, sound_limit = fields

    start_seconds = 60 * _parse_int(start_min, "start minutes") + _parse_int(start_sec, "start seconds")
    limit_seconds = 60 * _parse_int(limit_min, "limit minutes") + _parse_int(limit_sec, "limit seconds")
    return TimerConfig(
        start_seconds=max(0, start_seconds),
        limit_seconds=max(0, limit_seconds),
        sound_zero_path=sound_zero,
        sound_limit_path=sound_limit,
    )


def load_config(path: Union[str, Path] = CONFIG_FILE) -> TimerConfig:
    """Read ``path`` into a :class:`TimerConfig`.

    Never raises. A missing or unreadable file yields the defaults
    (0:10 start, 0:10 limit, no sounds); a readable file with missing or
    malformed lines yields 0 / empty string for those fields only.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.info("Config file %s not readable (%s); using defaults", path, exc)
        return TimerConfig()
    config = parse_config(text)
    logger.debug("Loaded %s: %s", path, config)
    return config
