# ImageFilters - Pixel filters for image nodes
#
# Blur and hue/saturation/luminance adjustment applied to a node's
# source bitmap.  Pixels are moved into a numpy array (RGBA8888,
# straight alpha), filtered there and copied back into a new QImage;
# the source image is never modified.

import math

import numpy as np
from PySide6.QtGui import QImage

BLUR_PASSES = 3


def image_to_array(image):
    """Copy a QImage into an (h, w, 4) uint8 RGBA array."""
    img = image.convertToFormat(QImage.Format.Format_RGBA8888)
    w, h = img.width(), img.height()
    raw = np.frombuffer(img.constBits(), dtype=np.uint8,
                        count=img.sizeInBytes())
    return raw.reshape(h, img.bytesPerLine())[:, :w * 4] \
        .reshape(h, w, 4).copy()


def array_to_image(arr):
    """Build a QImage that owns a copy of an (h, w, 4) RGBA array."""
    arr = np.ascontiguousarray(np.clip(arr, 0, 255), dtype=np.uint8)
    h, w = arr.shape[:2]
    data = arr.tobytes()
    return QImage(data, w, h, 4 * w, QImage.Format.Format_RGBA8888).copy()


# ----------------------------------------------------------------------
# Hue / saturation / luminance
# ----------------------------------------------------------------------
def hsl_matrix(hue, saturation, luminance):
    """Color matrix and offset for an HSL adjustment.

    Args:
        hue: Rotation in degrees, any value (wrapped into [0, 360)).
        saturation: Exponent; the chroma is scaled by 2**saturation.
        luminance: Brightness offset, -1..1 maps to about -127..127.

    Returns:
        (3x3 matrix, offset) so that rgb' = matrix @ rgb + offset.
    """
    h = math.radians(hue % 360)
    s = 2.0 ** saturation
    vsu = s * math.cos(h)
    vsw = s * math.sin(h)
    matrix = np.array([
        [0.299 + 0.701 * vsu + 0.167 * vsw,
         0.587 - 0.587 * vsu + 0.330 * vsw,
         0.114 - 0.114 * vsu - 0.497 * vsw],
        [0.299 - 0.299 * vsu - 0.328 * vsw,
         0.587 + 0.413 * vsu + 0.035 * vsw,
         0.114 - 0.114 * vsu + 0.293 * vsw],
        [0.299 - 0.300 * vsu + 1.250 * vsw,
         0.587 - 0.586 * vsu - 1.050 * vsw,
         0.114 + 0.886 * vsu - 0.200 * vsw],
    ])
    return matrix, luminance * 127.0


def adjust_hsl(arr, hue, saturation, luminance):
    matrix, offset = hsl_matrix(hue, saturation, luminance)
    out = arr.astype(np.float64)
    out[..., :3] = out[..., :3] @ matrix.T + offset
    return out


# ----------------------------------------------------------------------
# Blur
# ----------------------------------------------------------------------
def _box_blur_axis(a, r, axis):
    pad = [(0, 0)] * a.ndim
    pad[axis] = (r + 1, r)
    c = np.cumsum(np.pad(a, pad, mode="edge"), axis=axis)
    n = a.shape[axis]
    upper = np.take(c, np.arange(2 * r + 1, 2 * r + 1 + n), axis=axis)
    lower = np.take(c, np.arange(0, n), axis=axis)
    return (upper - lower) / (2 * r + 1)


def blur(arr, radius):
    """Approximate a Gaussian blur with repeated box blurs.

    Colors are premultiplied by alpha while blurring so transparent
    pixels do not bleed dark fringes into their neighbours.
    """
    r = max(1, int(round(radius / BLUR_PASSES)))
    out = arr.astype(np.float64)
    alpha = out[..., 3:4] / 255.0
    out[..., :3] *= alpha
    for _i in range(BLUR_PASSES):
        out = _box_blur_axis(out, r, 0)
        out = _box_blur_axis(out, r, 1)
    alpha = out[..., 3:4] / 255.0
    with np.errstate(divide="ignore", invalid="ignore"):
        out[..., :3] = np.where(alpha > 0, out[..., :3] / alpha, 0)
    return out


def apply_filters(image, filters):
    """Return image with filters applied, or image itself if none apply."""
    if image is None or image.isNull() or filters.is_identity():
        return image
    arr = image_to_array(image).astype(np.float64)
    if filters.hsl_enabled:
        arr = adjust_hsl(arr, filters.hue, filters.saturation,
                         filters.luminance)
    if filters.blur_enabled and filters.blur_radius > 0:
        arr = blur(np.clip(arr, 0, 255), filters.blur_radius)
    return array_to_image(arr)
