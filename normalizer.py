"""Image normalization: centre crop to 2:3, resize to 400x600, encode JPEG.

All decoding and encoding goes through Pillow. Photos are turned upright
according to their EXIF orientation before cropping.
"""

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from models import DecodeError, JPEG_QUALITY, TARGET_H, TARGET_W


log = logging.getLogger(__name__)


def crop_box(width: int, height: int,
             target_w: int = TARGET_W, target_h: int = TARGET_H) -> tuple[float, float, float, float]:
    """Return the centred (left, top, right, bottom) region with the target aspect ratio."""
    src_aspect = width / height
    target_aspect = target_w / target_h
    if src_aspect > target_aspect:
        # Wider than target -- trim the sides
        sw = height * target_aspect
        sx = (width - sw) / 2
        return (sx, 0.0, sx + sw, float(height))
    # Taller (or equal) -- trim top and bottom
    sh = width / target_aspect
    sy = (height - sh) / 2
    return (0.0, sy, float(width), sy + sh)


def _flatten(img: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto white (JPEG has no alpha)."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.getchannel("A"))
        return background
    return img.convert("RGB")


def normalize(raw: bytes, target_w: int = TARGET_W, target_h: int = TARGET_H,
              quality: int = JPEG_QUALITY) -> bytes:
    """Decode raw image bytes and return canonical JPEG bytes.

    Raises DecodeError if Pillow cannot read the image.
    """
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError, EOFError,
            Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    try:
        img = ImageOps.exif_transpose(img)
    except (OSError, ValueError, SyntaxError, KeyError, TypeError) as e:
        log.warning("Ignoring unreadable EXIF orientation: %s", e)
    if img.width <= 0 or img.height <= 0:
        raise DecodeError("Image has no pixels")

    img = _flatten(img)
    box = crop_box(img.width, img.height, target_w, target_h)
    img = img.resize((target_w, target_h), Image.Resampling.LANCZOS, box=box)

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()
