"""Load optional planner configuration from ``.taskmd.yaml``.

The file is read once by the caller and turned into immutable option values
(:class:`RecommendOptions`, :class:`TrackOptions`) that are passed into the
engine functions explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from .io_utils import _load_data_with_error
from .recommend import RecommendOptions, ScoringWeights
from .tracks import TrackOptions

CONFIG_FILENAMES = (".taskmd.yaml", ".taskmd.yml", ".taskmd.json")
DEFAULT_NEXT_LIMIT = 5


class ConfigError(ValueError):
    """Raised when a config file exists but cannot be used."""


class ScoringConfig(BaseModel):
    """Overrides for :class:`ScoringWeights`; unset fields keep defaults."""

    priority_critical: Optional[int] = None
    priority_high: Optional[int] = None
    priority_medium: Optional[int] = None
    priority_low: Optional[int] = None
    critical_path: Optional[int] = None
    per_downstream: Optional[int] = None
    downstream_max: Optional[int] = None
    effort_small: Optional[int] = None


class NextConfig(BaseModel):
    limit: int = Field(default=DEFAULT_NEXT_LIMIT, ge=1)


class TracksConfig(BaseModel):
    limit: Optional[int] = Field(default=None, ge=1)


class PlannerConfig(BaseModel):
    """Validated contents of the planner config file."""

    scopes: Optional[dict[str, Any]] = None
    next: NextConfig = Field(default_factory=NextConfig)
    tracks: TracksConfig = Field(default_factory=TracksConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @field_validator("scopes", mode="before")
    @classmethod
    def _scopes_as_mapping(cls, value: Any) -> Any:
        # A bare list of names is accepted as shorthand for a mapping.
        if isinstance(value, list):
            return {str(name): {} for name in value}
        return value


def find_config_file(project_dir: Path) -> Optional[Path]:
    """Return the first config file present in ``project_dir``."""
    for name in CONFIG_FILENAMES:
        candidate = project_dir / name
        if candidate.exists():
            return candidate
    return None


def load_planner_config(project_dir: Path) -> PlannerConfig:
    """Load and validate the planner config for a project directory.

    Args:
        project_dir: Directory holding ``.taskmd.yaml``.

    Returns:
        The parsed config, or defaults when no config file exists.

    Raises:
        ConfigError: If the file exists but is unreadable or invalid.
    """
    path = find_config_file(project_dir.resolve())
    if path is None:
        return PlannerConfig()

    data, err = _load_data_with_error(path, {})
    if err:
        raise ConfigError(err)
    try:
        config = PlannerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc
    logger.debug("Loaded planner config from {}", path)
    return config


def get_known_scopes(config: PlannerConfig) -> Optional[frozenset[str]]:
    """Recognised scope names, or None when no scopes are configured."""
    if config.scopes is None:
        return None
    return frozenset(config.scopes)


def get_scoring_weights(config: PlannerConfig) -> ScoringWeights:
    overrides = config.scoring.model_dump(exclude_none=True)
    return ScoringWeights(**overrides)


def build_recommend_options(
    config: PlannerConfig,
    *,
    limit: Optional[int] = None,
    filters: Sequence[str] = (),
    quick_wins: bool = False,
    critical: bool = False,
) -> RecommendOptions:
    """Combine config defaults with per-call choices."""
    return RecommendOptions(
        limit=limit if limit is not None else config.next.limit,
        filters=tuple(filters),
        quick_wins=quick_wins,
        critical=critical,
        weights=get_scoring_weights(config),
    )


def build_track_options(
    config: PlannerConfig,
    *,
    limit: Optional[int] = None,
    filters: Sequence[str] = (),
) -> TrackOptions:
    return TrackOptions(
        filters=tuple(filters),
        known_scopes=get_known_scopes(config),
        limit=limit if limit is not None else config.tracks.limit,
        weights=get_scoring_weights(config),
    )
