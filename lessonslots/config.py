"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
import re
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import DEFAULT_LESSON_DURATION, ProfileDefaults, WeekConfig
from .domain.time_math import to_minutes

CONFIG_ENV_VAR = "LESSONSLOTS_CONFIG"
CONFIG_FILE_NAME = "config.yaml"

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_hhmm(value: str) -> str:
    if not _HHMM.match(value):
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return value


class ProfileConfig(BaseModel):
    """Instructor profile defaults."""
    lesson_duration: int = DEFAULT_LESSON_DURATION
    default_double_lesson: bool = False
    vehicle_types: List[str] = Field(default_factory=list)
    exam_centers: List[str] = Field(default_factory=list)

    @field_validator("lesson_duration")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure lesson duration is positive."""
        if value <= 0:
            raise ValueError("lesson_duration must be greater than zero")
        return value

    def to_profile_defaults(self) -> ProfileDefaults:
        return ProfileDefaults(
            lesson_duration=self.lesson_duration,
            default_double_lesson=self.default_double_lesson,
            vehicle_types=list(self.vehicle_types),
            exam_centers=list(self.exam_centers),
        )


class AutoFillConfig(BaseModel):
    """
    Defaults for the week auto-fill.

    Unset lesson fields fall back to the instructor profile.
    """
    working_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])  # 0=Sunday
    start_time: str = "08:00"
    end_time: str = "18:00"
    lesson_duration: Optional[int] = None
    is_double: Optional[bool] = None
    vehicle_type: Optional[str] = None
    skip_lunch: bool = True
    exam_center: Optional[str] = None
    location: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_hhmm(value)

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: List[int]) -> List[int]:
        """Weekdays are 0 (Sunday) to 6 (Saturday); repeats are dropped, order kept."""
        out_of_range = sorted({day for day in value if not 0 <= day <= 6})
        if out_of_range:
            raise ValueError(f"working_days must be between 0 and 6, got {out_of_range}")
        return list(dict.fromkeys(value))

    @field_validator("lesson_duration")
    @classmethod
    def validate_duration(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("lesson_duration must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_window_order(self) -> "AutoFillConfig":
        """Ensure the working window opens before it closes."""
        if to_minutes(self.end_time) <= to_minutes(self.start_time):
            raise ValueError("end_time must be later than start_time")
        return self

    def to_week_config(self, profile: ProfileConfig) -> WeekConfig:
        """Resolve profile fallbacks into a domain WeekConfig."""
        vehicle_type = self.vehicle_type
        if vehicle_type is None:
            vehicle_type = profile.vehicle_types[0] if profile.vehicle_types else ""
        exam_center = self.exam_center
        if exam_center is None:
            exam_center = profile.exam_centers[0] if profile.exam_centers else ""

        return WeekConfig(
            working_days=frozenset(self.working_days),
            start_time=self.start_time,
            end_time=self.end_time,
            lesson_duration=self.lesson_duration or profile.lesson_duration,
            is_double=profile.default_double_lesson if self.is_double is None else self.is_double,
            vehicle_type=vehicle_type,
            skip_lunch=self.skip_lunch,
            exam_center=exam_center,
            location=self.location,
        )


class HolidayConfig(BaseModel):
    """Public-holiday lookup settings."""
    country_code: str = "HK"
    api_url: str = "https://date.nager.at/api/v3"
    timeout_seconds: float = 10.0

    @field_validator("country_code")
    @classmethod
    def validate_country_code(cls, value: str) -> str:
        if len(value) != 2 or not value.isalpha():
            raise ValueError(f"country_code must be a two-letter code, got {value!r}")
        return value.upper()


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Hong_Kong"
    store_path: Path = Path("slots.json")
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    auto_fill: AutoFillConfig = Field(default_factory=AutoFillConfig)
    holidays: HolidayConfig = Field(default_factory=HolidayConfig)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Read an ``AppConfig`` from a YAML file.

        An empty file yields the defaults.

        Raises:
            FileNotFoundError: If ``config_path`` does not exist
            ValueError: If the YAML is malformed, its root is not a mapping,
                or a value fails validation
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Copy config.example.yaml to config.yaml and adjust it, or pass --config."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def week_config(self) -> WeekConfig:
        return self.auto_fill.to_week_config(self.profile)


def get_default_config_path() -> Path:
    """
    Config file used when none is given on the command line.

    ``$LESSONSLOTS_CONFIG`` wins; otherwise the first existing ``config.yaml``
    in the working directory or next to the package. The returned path may
    not exist.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)

    candidates = [Path.cwd() / CONFIG_FILE_NAME, Path(__file__).resolve().parent.parent / CONFIG_FILE_NAME]
    return next((path for path in candidates if path.exists()), candidates[0])
