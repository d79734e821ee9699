"""Utility functions for image retrieval and storage"""
from .image import (
    fetch_image_bytes,
    decode_image,
    load_image,
    encode_data_url,
    ImageProcessingError,
    ImageFetchError,
    ImageDecodingError
)
from .storage import store_upload

__all__ = [
    'fetch_image_bytes',
    'decode_image',
    'load_image',
    'encode_data_url',
    'ImageProcessingError',
    'ImageFetchError',
    'ImageDecodingError',
    'store_upload'
]
