"""
Image loading for grid sampling.
"""

import os
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import LoadError


def load_image(image_path: str, aspect_ratio: Optional[float] = None,
               background: Tuple[int, int, int] = (255, 255, 255)) -> Tuple[np.ndarray, dict]:
    """
    Load an image as an RGB array ready for sampling.

    Args:
        image_path: Path to input image
        aspect_ratio: Target width/height; the image is center-cropped to it
        background: Color transparent pixels are composited onto

    Returns:
        Tuple of (rgb_array (H, W, 3) uint8, metadata)
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Image not found: {image_path}")

    try:
        pil_image = Image.open(image_path)
        pil_image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise LoadError(f"Failed to load image {image_path}: {e}") from e

    metadata = {
        'original_size': pil_image.size,
        'original_mode': pil_image.mode,
        'filename': os.path.basename(image_path),
    }

    # Auto-orient image based on EXIF
    pil_image = ImageOps.exif_transpose(pil_image)
    pil_image = flatten_onto(pil_image, background)

    rgb_image = np.array(pil_image)
    if aspect_ratio is not None:
        rgb_image = crop_to_aspect_ratio(rgb_image, aspect_ratio)

    metadata['processed_size'] = (rgb_image.shape[1], rgb_image.shape[0])
    return rgb_image, metadata


def flatten_onto(pil_image: Image.Image, background: Tuple[int, int, int]) -> Image.Image:
    """Convert to RGB, compositing any transparency onto ``background``."""
    if pil_image.mode in ('RGBA', 'LA') or (pil_image.mode == 'P' and 'transparency' in pil_image.info):
        rgba = pil_image.convert('RGBA')
        base = Image.new('RGBA', rgba.size, background + (255,))
        return Image.alpha_composite(base, rgba).convert('RGB')
    if pil_image.mode != 'RGB':
        return pil_image.convert('RGB')
    return pil_image


def crop_to_aspect_ratio(image: np.ndarray, target_aspect: float) -> np.ndarray:
    """Center-crop an image array to the target width/height ratio."""
    if target_aspect <= 0:
        raise ValueError("Aspect ratio must be positive")

    h, w = image.shape[:2]
    current_aspect = w / h

    if abs(current_aspect - target_aspect) < 0.01:  # Within 1% tolerance
        return image

    if current_aspect > target_aspect:
        # Image is too wide - crop width
        new_width = max(1, int(round(h * target_aspect)))
        x_start = (w - new_width) // 2
        return image[:, x_start:x_start + new_width]

    # Image is too tall - crop height
    new_height = max(1, int(round(w / target_aspect)))
    y_start = (h - new_height) // 2
    return image[y_start:y_start + new_height, :]
