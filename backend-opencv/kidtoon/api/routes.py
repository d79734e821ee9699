"""Cartoon generation API routes.

This module provides the API endpoints for uploading a child's photo,
deriving its stylization parameters and rendering the cartoon.
"""

import asyncio
import logging
import traceback
from fastapi import APIRouter, File, HTTPException, UploadFile, status
from typing import Dict
from ..utils.image import ImageProcessingError, encode_data_url
from ..utils.storage import store_upload
from ..core.face_detection import NoFaceDetectedError, detector
from ..core.generation import CartoonGenerator, GenerationError
from ..core.pipeline import analyze_image
from ..models.types import (
    AnalyzeResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    UploadResponse
)

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()

generator = CartoonGenerator()

def _require_image_url(request_data: GenerateRequest) -> str:
    image_url = request_data.get('imageUrl')
    if not image_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="imageUrl required"
        )
    return image_url

def _internal_error(e: Exception) -> HTTPException:
    error_details: ErrorResponse = {
        'error': str(e),
        'traceback': traceback.format_exc()
    }
    logger.error("Error details:", extra=error_details)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_details
    )

@router.get("/health")
async def health() -> Dict:
    """Report service status and whether age/gender models are loaded."""
    return {
        'status': 'ok',
        'ageGenderModelsLoaded': detector.age_gender_available
    }

@router.post("/upload", response_model=UploadResponse)
async def upload_image(image: UploadFile = File(...)) -> Dict:
    """Store an uploaded photo and return its URL.

    Raises:
        HTTPException: If the upload is not an image.
    """
    image_bytes = await image.read()
    try:
        image_url = store_upload(image_bytes, image.filename, image.content_type)
    except ValueError as e:
        logger.warning(f"Upload rejected: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return {'imageUrl': image_url}

@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request_data: GenerateRequest) -> Dict:
    """Derive stylization parameters without rendering.

    Args:
        request_data: Dictionary containing the photo URL.
            - imageUrl: URL returned by the upload endpoint

    Returns:
        Dictionary containing:
            - params: Stylization parameters
            - face: Detected age, gender and face box

    Raises:
        HTTPException: If the photo cannot be loaded or has no face
    """
    image_url = _require_image_url(request_data)
    try:
        face, params = await asyncio.to_thread(analyze_image, image_url)
    except NoFaceDetectedError as e:
        logger.warning(f"Face detection error: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ImageProcessingError as e:
        logger.warning(f"Image error: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise _internal_error(e)

    return {
        'params': params,
        'face': {'age': face['age'], 'gender': face['gender'], 'box': face['box']}
    }

@router.post("/generate", response_model=GenerateResponse)
async def generate(request_data: GenerateRequest) -> Dict:
    """Render a cartoon version of the child in the photo.

    Args:
        request_data: Dictionary containing the photo URL.
            - imageUrl: URL returned by the upload endpoint

    Returns:
        Dictionary containing:
            - image: Rendered cartoon as a PNG data URL
            - params: Stylization parameters used for the prompt

    Raises:
        HTTPException: If the photo has no face or generation fails
    """
    image_url = _require_image_url(request_data)
    try:
        _, params = await asyncio.to_thread(analyze_image, image_url)

        logger.info("Generating cartoon...")
        image_bytes = await asyncio.to_thread(generator.generate, image_url, params)

        return {'image': encode_data_url(image_bytes), 'params': params}

    except NoFaceDetectedError as e:
        logger.warning(f"Face detection error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ImageProcessingError as e:
        logger.warning(f"Image error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except GenerationError as e:
        logger.error(f"Generation failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Generation failed"
        )
    except Exception as e:
        raise _internal_error(e)
