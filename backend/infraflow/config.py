import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load .env from project root
load_dotenv()

INTERACTION_CAPACITY = int(os.getenv("INFRAFLOW_INTERACTION_CAPACITY", "10000"))


class CalibrationConfig(BaseModel):
    """Thresholds for anti-pattern severity calibration."""
    model_config = ConfigDict(frozen=True)

    min_samples_for_calibration: int = Field(default=10, ge=0)
    ignore_rate_downgrade1: float = Field(default=0.7, ge=0.0, le=1.0)
    ignore_rate_downgrade2: float = Field(default=0.9, ge=0.0, le=1.0)
    fix_rate_upgrade: float = Field(default=0.5, ge=0.0, le=1.0)
    critical_min_severity: Literal["critical", "high", "medium", "low"] = "medium"

    @classmethod
    def from_env(cls) -> "CalibrationConfig":
        """Build a config from INFRAFLOW_* environment overrides."""
        defaults = cls()
        return cls(
            min_samples_for_calibration=os.getenv(
                "INFRAFLOW_MIN_SAMPLES", defaults.min_samples_for_calibration
            ),
            ignore_rate_downgrade1=os.getenv(
                "INFRAFLOW_IGNORE_RATE_DOWNGRADE1", defaults.ignore_rate_downgrade1
            ),
            ignore_rate_downgrade2=os.getenv(
                "INFRAFLOW_IGNORE_RATE_DOWNGRADE2", defaults.ignore_rate_downgrade2
            ),
            fix_rate_upgrade=os.getenv(
                "INFRAFLOW_FIX_RATE_UPGRADE", defaults.fix_rate_upgrade
            ),
            critical_min_severity=os.getenv(
                "INFRAFLOW_CRITICAL_MIN_SEVERITY", defaults.critical_min_severity
            ),
        )
