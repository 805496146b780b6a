"""Engine package: diurnal simulation, economics and parameter sweeps."""

from .simulate import hourly_profile, simulate
from .sweep import sweep

__all__ = ["simulate", "hourly_profile", "sweep"]
