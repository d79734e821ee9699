"""Data models and type definitions"""
from .types import (
    HeadTurn,
    Smile,
    Gender,
    Point,
    Landmarks,
    Box,
    Region,
    ClampedRegion,
    SamplingRegions,
    ColorSample,
    FaceAnalysis,
    StylizationParams,
    FaceSummary,
    GenerateRequest,
    GenerateResponse,
    AnalyzeResponse,
    UploadResponse,
    ErrorResponse
)

__all__ = [
    'HeadTurn',
    'Smile',
    'Gender',
    'Point',
    'Landmarks',
    'Box',
    'Region',
    'ClampedRegion',
    'SamplingRegions',
    'ColorSample',
    'FaceAnalysis',
    'StylizationParams',
    'FaceSummary',
    'GenerateRequest',
    'GenerateResponse',
    'AnalyzeResponse',
    'UploadResponse',
    'ErrorResponse'
]
