"""Data models and type definitions"""
from typing import List, Optional
from typing_extensions import Literal, TypedDict

HeadTurn = Literal["left", "center", "right"]
Smile = Literal["smiling", "neutral"]
Gender = Literal["male", "female", "unknown"]

class Point(TypedDict):
    x: float
    y: float

# Exactly 68 points in iBUG order
Landmarks = List[Point]

class Box(TypedDict):
    x: float
    y: float
    width: float
    height: float

class Region(TypedDict):
    x: float
    y: float
    width: float
    height: float

class ClampedRegion(TypedDict):
    x: int
    y: int
    width: int
    height: int

class SamplingRegions(TypedDict):
    hair: Region
    eyes: Region
    outfit: Region

class ColorSample(TypedDict):
    hex: str
    fallback: bool

class FaceAnalysis(TypedDict):
    age: int
    gender: Gender
    landmarks: Landmarks
    box: Box

class StylizationParams(TypedDict):
    headTilt: float
    headTurn: HeadTurn
    smile: Smile
    hairColor: str
    eyeColor: str
    outfitColor: str
    age: int
    gender: Gender
    eyeDistance: float
    fallbackRegions: List[str]

class FaceSummary(TypedDict):
    age: int
    gender: Gender
    box: Box

class GenerateRequest(TypedDict, total=False):
    imageUrl: str

class GenerateResponse(TypedDict):
    image: str
    params: StylizationParams

class AnalyzeResponse(TypedDict):
    params: StylizationParams
    face: FaceSummary

class UploadResponse(TypedDict):
    imageUrl: str

class ErrorResponse(TypedDict):
    error: str
    traceback: Optional[str]
