"""Save and load detector parameters."""

import math
from dataclasses import asdict, dataclass, fields, replace

import yaml

from .errors import ParameterOutOfRangeError


@dataclass(frozen=True)
class HoughParams:
    """Parameters of ``hough_lines``."""

    rho_step: float = 1.0
    theta_step: float = math.pi / 180
    vote_threshold: int = 100
    max_lines: int = 20
    rho_merge: float = 15.0
    theta_merge: float = 0.15
    axis_tolerance: float = None


@dataclass(frozen=True)
class HarrisParams:
    """Parameters of ``detect_corners``."""

    block_size: int = 5
    kernel_size: int = 3
    k: float = 0.04
    window: str = "gaussian"
    relative_threshold: float = 0.05
    neighbourhood: int = 7
    erode_size: int = None
    policy: str = "morphological"
    min_distance: float = 3.0
    percentile: float = None
    max_corners: int = None
    border_mode: str = "nearest"


def _from_mapping(cls, values):
    values = values or {}
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ParameterOutOfRangeError(f"unknown {cls.__name__} keys: {', '.join(unknown)}")
    return cls(**values)


def update_params(params, **overrides):
    """Return a copy of ``params`` with the non-None overrides applied."""
    return replace(params, **{key: value for key, value in overrides.items() if value is not None})


def save_parameters(hough=None, harris=None, filename="pixfeat.yaml"):
    """Save detector parameters to YAML."""
    document = {
        "hough": asdict(hough or HoughParams()),
        "harris": asdict(harris or HarrisParams()),
    }
    with open(filename, "w") as f:
        yaml.dump(document, f, sort_keys=False)


def load_parameters(filename="pixfeat.yaml"):
    """Load detector parameters from YAML, filling missing keys with defaults."""
    with open(filename, "r") as f:
        document = yaml.safe_load(f) or {}
    if not isinstance(document, dict):
        raise ParameterOutOfRangeError(f"{filename} does not hold a mapping")
    unknown = sorted(set(document) - {"hough", "harris"})
    if unknown:
        raise ParameterOutOfRangeError(f"unknown sections in {filename}: {', '.join(unknown)}")
    return (
        _from_mapping(HoughParams, document.get("hough")),
        _from_mapping(HarrisParams, document.get("harris")),
    )
