# envlights/image_source.py
"""
Loading of floating point environment maps (Radiance HDR and OpenEXR)
"""
import os

# OpenCV only decodes EXR when asked to before it is imported
os.environ.setdefault("OPENCV_IO_ENABLE_OPENEXR", "1")

import cv2
import numpy as np

from .errors import ImageDecodeError

RADIANCE_MAGIC = b"#?"
OPENEXR_MAGIC = b"\x76\x2f\x31\x01"

FORMAT_EXTENSIONS = {
    '.hdr': 'hdr',
    '.pic': 'hdr',
    '.rgbe': 'hdr',
    '.exr': 'exr',
}


def detect_format(path):
    """
    Image format from the file header, falling back to the extension

    Returns:
        'hdr', 'exr' or None when unsupported
    """
    with open(path, 'rb') as f:
        header = f.read(4)

    if header.startswith(RADIANCE_MAGIC):
        return 'hdr'
    if header == OPENEXR_MAGIC:
        return 'exr'
    return FORMAT_EXTENSIONS.get(os.path.splitext(path)[1].lower())


def load_image(path):
    """
    Decode an HDR environment map

    Args:
        path: .hdr or .exr file

    Returns:
        (pixels, width, height, channels) with pixels a float32 RGB(A)
        array of shape (height, width, channels)

    Raises:
        ImageDecodeError: if the file is absent, truncated or unsupported
    """
    path = str(path)
    if not os.path.isfile(path):
        raise ImageDecodeError(f"Image file not found: {path}")

    fmt = detect_format(path)
    if fmt is None:
        raise ImageDecodeError(f"Unsupported image format: {path}")

    if fmt == 'hdr':
        flags = cv2.IMREAD_ANYDEPTH | cv2.IMREAD_COLOR
    else:
        flags = cv2.IMREAD_UNCHANGED

    try:
        image = cv2.imread(path, flags)
    except cv2.error as e:
        raise ImageDecodeError(f"Cannot decode {path}: {e}") from e

    if image is None or image.size == 0:
        raise ImageDecodeError(f"Cannot decode {path} as {fmt.upper()}")

    # OpenCV hands back BGR(A)
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
    elif image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    pixels = np.ascontiguousarray(image, dtype=np.float32)
    height, width, channels = pixels.shape
    return pixels, width, height, channels


def save_image(path, pixels):
    """Write a float RGB(A) array as .hdr or .exr"""
    pixels = np.asarray(pixels, dtype=np.float32)
    if pixels.shape[2] == 4:
        bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
    else:
        bgr = cv2.cvtColor(np.ascontiguousarray(pixels[..., :3]), cv2.COLOR_RGB2BGR)
    if not cv2.imwrite(str(path), bgr):
        raise OSError(f"Cannot write {path}")
