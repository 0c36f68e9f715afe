"""Image processing utilities for tool responses (metadata and inline previews)"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger("AssetProcessor")

DATA_URI_PREFIX = "data:image/webp;base64,"


def get_image_metadata(image_bytes: bytes) -> Dict[str, Any]:
    """Extract width, height, format from image bytes"""
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            return {
                "width": img.width,
                "height": img.height,
                "format": img.format
            }
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Failed to extract image metadata: {e}")
        return {"width": None, "height": None, "format": None}


@dataclass(frozen=True)
class EncodedImage:
    """Encoded preview with its size metrics"""
    b64: str  # Base64 string (without data URI prefix)
    mime_type: str
    size_px: Tuple[int, int]
    bytes_len: int
    b64_chars: int

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.b64}"


def _resize_to(im: Image.Image, target: int) -> Image.Image:
    w, h = im.size
    if max(w, h) <= target:
        return im
    scale = target / max(w, h)
    return im.resize((max(1, int(w * scale)), max(1, int(h * scale))), Image.Resampling.LANCZOS)


def encode_preview_for_mcp(
    image_bytes: bytes,
    *,
    max_dim: int = 512,
    max_b64_chars: int = 100_000,
    quality: int = 70,
) -> EncodedImage:
    """
    Downscale and re-encode an image as WebP so it fits a base64 budget.

    Uses a fixed quality/downscale ladder so the same input always gives the
    same preview. The budget counts the data URI prefix as well.

    Raises:
        ValueError: If the image still exceeds the budget at the smallest size
    """
    with Image.open(BytesIO(image_bytes)) as loaded_im:
        im = ImageOps.exif_transpose(loaded_im)
        if im.mode not in ("RGB", "L", "RGBA", "LA"):
            im = im.convert("RGB")
        src_w, src_h = im.size

        for target in (max_dim, 384, 256):
            resized = _resize_to(im, target)
            for q in (quality, 55, 40, 35):
                buf = BytesIO()
                resized.save(buf, format="WEBP", quality=q, method=5)
                encoded = buf.getvalue()
                b64_string = base64.b64encode(encoded).decode("ascii")
                if len(b64_string) + len(DATA_URI_PREFIX) <= max_b64_chars:
                    logger.info(
                        f"preview encoding: src_dims={src_w}x{src_h} "
                        f"preview_dims={resized.size[0]}x{resized.size[1]} quality={q} "
                        f"encoded={len(encoded)}B b64_chars={len(b64_string)}"
                    )
                    return EncodedImage(
                        b64=b64_string,
                        mime_type="image/webp",
                        size_px=resized.size,
                        bytes_len=len(encoded),
                        b64_chars=len(b64_string),
                    )

    raise ValueError(
        f"Image exceeds base64 budget of {max_b64_chars} chars even at 256px, quality=35. Refusing to inline."
    )
