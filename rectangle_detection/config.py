"""
Tunable detector parameters.

Defaults are the empirically tuned values the detector ships with. They can be
overridden per instance or through RECT_* environment variables.
"""

import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class ScoringWeights:
    """
    Weights of the rectangle score.

    total = area * area_score + aspect * aspect_score + edge * edge_score
            + position * position_score + max(0, area_ratio - bonus_threshold) * bonus_factor
    """
    area: float = 0.8
    aspect: float = 0.1
    edge: float = 0.05
    position: float = 0.05
    bonus_threshold: float = 0.15
    bonus_factor: float = 2.0


# env var -> (detector keyword, parser)
_DETECTOR_ENV: Dict[str, tuple] = {
    "RECT_BLUR_KERNEL": ("blur_kernel", int),
    "RECT_CANNY_LOW": ("canny_low", float),
    "RECT_CANNY_HIGH": ("canny_high", float),
    "RECT_MIN_AREA_RATIO": ("min_area_ratio", float),
    "RECT_MAX_AREA_RATIO": ("max_area_ratio", float),
    "RECT_MAX_CONTOURS": ("max_contours", int),
    "RECT_RELAX_AREA_RATIO": ("relax_area_ratio", float),
    "RECT_CONTOUR_MODE": ("contour_mode", str),
}

_WEIGHTS_ENV: Dict[str, str] = {
    "RECT_WEIGHT_AREA": "area",
    "RECT_WEIGHT_ASPECT": "aspect",
    "RECT_WEIGHT_EDGE": "edge",
    "RECT_WEIGHT_POSITION": "position",
    "RECT_BONUS_THRESHOLD": "bonus_threshold",
    "RECT_BONUS_FACTOR": "bonus_factor",
}


def _read(name: str, parse: Callable, environ) -> Optional[object]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return parse(raw.strip())
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e


def weights_from_env(environ=None) -> ScoringWeights:
    environ = os.environ if environ is None else environ
    values = {}
    for name, field_name in _WEIGHTS_ENV.items():
        value = _read(name, float, environ)
        if value is not None:
            values[field_name] = value
    return ScoringWeights(**values)


def detector_kwargs_from_env(environ=None) -> Dict[str, object]:
    """
    Collect RectangleDetector keyword arguments from the environment.

    Unset variables are left out so the detector defaults apply.
    """
    environ = os.environ if environ is None else environ
    kwargs = {}
    for name, (keyword, parse) in _DETECTOR_ENV.items():
        value = _read(name, parse, environ)
        if value is not None:
            kwargs[keyword] = value

    weights = weights_from_env(environ)
    if weights != ScoringWeights():
        kwargs["weights"] = weights

    return kwargs
