"""Core face analysis and stylization functionality"""
from .geometry import (
    calculate_head_tilt,
    estimate_head_turn,
    detect_smile,
    eye_distance
)
from .regions import plan_regions
from .color_sampler import (
    clamp_region,
    average_color,
    sample_region_color,
    sample_color,
    FALLBACK_COLOR
)
from .stylization import assemble_params

__all__ = [
    'calculate_head_tilt',
    'estimate_head_turn',
    'detect_smile',
    'eye_distance',
    'plan_regions',
    'clamp_region',
    'average_color',
    'sample_region_color',
    'sample_color',
    'FALLBACK_COLOR',
    'assemble_params'
]
