"""Stylization parameter assembly."""

from ..models.types import ColorSample, FaceAnalysis, HeadTurn, Smile, StylizationParams


def assemble_params(
    face: FaceAnalysis,
    hair: ColorSample,
    eyes: ColorSample,
    outfit: ColorSample,
    head_tilt: float,
    head_turn: HeadTurn,
    smile: Smile,
    eye_distance: float
) -> StylizationParams:
    """Merge detection metadata, geometry and sampled colors.

    Regions whose color is the fallback are listed in 'fallbackRegions'.
    """
    samples = (('hair', hair), ('eyes', eyes), ('outfit', outfit))
    return {
        'headTilt': head_tilt,
        'headTurn': head_turn,
        'smile': smile,
        'hairColor': hair['hex'],
        'eyeColor': eyes['hex'],
        'outfitColor': outfit['hex'],
        'age': face['age'],
        'gender': face['gender'],
        'eyeDistance': eye_distance,
        'fallbackRegions': [name for name, sample in samples if sample['fallback']]
    }
