"""
Services layer for the diffusion job client.

- GenerationService: submit -> await -> fetch -> bitmap -> file
- write_image: atomic output file writer
"""

from .generation_service import GenerationService
from .image_writer import write_image

__all__ = [
    "GenerationService",
    "write_image",
]
