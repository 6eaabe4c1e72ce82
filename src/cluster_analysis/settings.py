"""
Run configuration for the cluster-analysis command.

Values come from the command line; the log level falls back to the
CLUSTER_ANALYSIS_LOG_LEVEL environment variable.
"""

import logging
import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LOG_LEVEL_ENV = "CLUSTER_ANALYSIS_LOG_LEVEL"


def _default_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


class ClusteringSettings(BaseModel):
    """Validated settings for one clustering run."""
    n_clusters: int = Field(default=1, ge=1, description="Number of clusters to stop at")
    linkage: Literal["average", "min", "max"] = Field(default="average", description="Inter-cluster distance rule")
    log_level: str = Field(default_factory=_default_log_level, validate_default=True, description="Logging level")
    log_format: Literal["console", "json"] = Field(default="console", description="Log renderer")
    plot: bool = Field(default=False, description="Show a scatter plot of the result")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level
