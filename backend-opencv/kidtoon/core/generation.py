"""Cartoon generation client.

Turns stylization parameters into a text prompt and asks the external
image-generation service to render the child as a cartoon, using the
uploaded photo as the reference image.
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests

from ..config import settings
from ..models.types import StylizationParams

logger = logging.getLogger(__name__)

class GenerationError(Exception):
    """Exception raised when the generation service fails."""
    pass

def build_prompt(params: StylizationParams) -> str:
    """Build the rendering prompt for a set of stylization parameters."""
    gender = params['gender'] if params['gender'] != 'unknown' else 'child'
    lines = [
        "Pixar style 3D child character",
        "age 5-7",
        gender,
        "cinematic soft lighting",
        "subsurface skin scattering",
        "smooth skin gradient",
        f"hair color {params['hairColor']}",
        f"eye color {params['eyeColor']}",
        f"outfit color {params['outfitColor']}",
        f"big expressive eyes (eye distance {round(params['eyeDistance'])}px)",
        params['smile'],
        f"head tilt {round(params['headTilt'])} degrees",
        f"facing {params['headTurn']}",
        "same illustration style",
        "no background, transparent",
    ]
    return ",\n".join(lines)

class CartoonGenerator:
    """Client for the prompt-to-image generation service."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.generation_base_url).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.generation_timeout

    def build_url(self, image_url: str, prompt: str) -> str:
        return f"{self.base_url}/prompt/{quote(prompt, safe='')}?input={quote(image_url, safe='')}"

    def generate(self, image_url: str, params: StylizationParams) -> bytes:
        """Render a cartoon for the reference image.

        Args:
            image_url: Locator of the uploaded reference photo.
            params: Fully populated stylization parameters.

        Returns:
            Rendered image bytes.

        Raises:
            GenerationError: If the service call fails. No retry is made.
        """
        url = self.build_url(image_url, build_prompt(params))
        logger.info(f"Requesting cartoon generation for {image_url}")

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise GenerationError(f"Generation request failed: {str(e)}")

        if not response.content:
            raise GenerationError("Generation service returned an empty image")

        logger.info(f"Received {len(response.content)} bytes from generation service")
        return response.content
