"""Image import/export utilities for rendered frames and backgrounds.

Supported formats:
    - PNG (8-bit RGB or RGBA via Pillow)

Backgrounds can be loaded from any format Pillow reads and are resized to
the render target.

Example:
    >>> from raymarcher.preview.export import load_background, save_png_from_array
    >>>
    >>> background = load_background("grid.png", 640, 480)
    >>> image = renderer.render(params, background)
    >>> save_png_from_array(image, "output.png")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raymarcher.preview.display import process_image_for_display


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
    keep_alpha: bool = False,
) -> npt.NDArray[np.uint8]:
    """Convert a float image to uint8 for display/export.

    Args:
        image: Image array of shape (H, W, 3|4).
        gamma: Gamma encoding applied to the color channels.
        keep_alpha: Keep the alpha channel of RGBA input.

    Returns:
        8-bit image array of shape (H, W, 3) (or (H, W, 4) with alpha).
    """
    processed = process_image_for_display(image, gamma=gamma, keep_alpha=keep_alpha)
    return np.round(processed * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 1.0,
    keep_alpha: bool = False,
) -> None:
    """Save a NumPy image as a PNG file.

    Args:
        image: Image array of shape (H, W, 3|4) with values in [0, 1].
        filepath: Output file path (should end in .png).
        gamma: Gamma encoding applied to the color channels.
        keep_alpha: Write an RGBA PNG when the image has alpha.
    """
    image_uint8 = image_to_uint8(image, gamma=gamma, keep_alpha=keep_alpha)

    mode = "RGBA" if image_uint8.shape[2] == 4 else "RGB"
    pil_image = PILImage.fromarray(image_uint8, mode=mode)
    pil_image.save(filepath)


def load_background(
    filepath: str,
    width: int | None = None,
    height: int | None = None,
) -> npt.NDArray[np.float32]:
    """Load an image file as a float RGB background.

    Args:
        filepath: Path to an image Pillow can read.
        width: Target width; the image is resized when width and height are
            given and differ from the file.
        height: Target height.

    Returns:
        Float32 array of shape (H, W, 3) with values in [0, 1].

    Raises:
        ValueError: If only one of width and height is given.
    """
    if (width is None) != (height is None):
        raise ValueError("width and height must be given together")

    with PILImage.open(filepath) as pil_image:
        rgb = pil_image.convert("RGB")
        if width is not None and height is not None and rgb.size != (width, height):
            rgb = rgb.resize((width, height), PILImage.Resampling.BILINEAR)
        array = np.asarray(rgb, dtype=np.float32)

    return array / 255.0


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
