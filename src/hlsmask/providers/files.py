"""
File-backed inputs: blackout interval lists and filename -> locator maps.

Both are read with yaml.safe_load, which also accepts JSON. Interval entries
may use the lock-record field names (``startTime``/``endTime``) as well as
``start``/``end``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from hlsmask.domain.segments import BlackoutInterval
from hlsmask.infra.exceptions import ConfigurationError, PartitionError

_logger = logging.getLogger(__name__)

# Keys under which a mapping document may hold its interval list
INTERVAL_LIST_KEYS = ("blackouts", "intervals", "blackout-locks")


class IntervalRecord(BaseModel):
    """One interval entry as it appears in a file."""

    model_config = ConfigDict(extra="ignore")

    start: float = Field(validation_alias=AliasChoices("start", "startTime", "starttime", "start_time"))
    end: float = Field(validation_alias=AliasChoices("end", "endTime", "endtime", "end_time"))

    def to_interval(self) -> BlackoutInterval:
        return BlackoutInterval(start=self.start, end=self.end)


def _read_document(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}") from e


def parse_intervals(data: Any, origin: str = "<data>") -> list[BlackoutInterval]:
    """Convert a decoded document (list, or mapping holding a list) into intervals."""
    if data is None:
        return []
    if isinstance(data, dict):
        for key in INTERVAL_LIST_KEYS:
            if key in data:
                data = data[key]
                break
        else:
            raise ConfigurationError(
                f"{origin}: expected a list or a mapping with one of {', '.join(INTERVAL_LIST_KEYS)}"
            )
    if not isinstance(data, list):
        raise ConfigurationError(f"{origin}: interval list must be a list, got {type(data).__name__}")

    intervals: list[BlackoutInterval] = []
    for position, entry in enumerate(data):
        try:
            intervals.append(IntervalRecord.model_validate(entry).to_interval())
        except ValidationError as e:
            raise ConfigurationError(f"{origin}: entry {position} is invalid: {e}") from e
        except PartitionError as e:
            raise ConfigurationError(f"{origin}: entry {position}: {e}") from e
    return intervals


def load_intervals(path: Path) -> list[BlackoutInterval]:
    """Load blackout intervals from a JSON or YAML file."""
    intervals = parse_intervals(_read_document(path), origin=str(path))
    _logger.debug("Loaded %d blackout interval(s) from %s", len(intervals), path)
    return intervals


def parse_interval_spec(spec: str) -> BlackoutInterval:
    """Parse a ``START:END`` command-line value (seconds)."""
    start_text, sep, end_text = spec.partition(":")
    if not sep:
        raise ConfigurationError(f"Blackout must look like START:END, got {spec!r}")
    try:
        return BlackoutInterval(start=float(start_text), end=float(end_text))
    except ValueError:
        raise ConfigurationError(f"Blackout bounds must be numbers, got {spec!r}") from None
    except PartitionError as e:
        raise ConfigurationError(f"Invalid blackout {spec!r}: {e}") from e


def load_locator_map(path: Path) -> dict[str, str]:
    """Load a filename -> locator mapping from a JSON or YAML file."""
    data = _read_document(path)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: locator map must be a mapping of file name to locator")
    locators: dict[str, str] = {}
    for name, locator in data.items():
        if not isinstance(locator, str) or not locator.strip():
            raise ConfigurationError(f"{path}: locator for {name!r} must be a non-empty string")
        locators[str(name).strip()] = locator.strip()
    return locators
