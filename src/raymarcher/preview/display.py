"""Matplotlib-based preview display for rendered frames.

Rendered frames are RGBA float images already composited over their
background, so display only drops alpha, optionally gamma-encodes and clamps.

Features:
    - Static preview window
    - Side-by-side comparison with difference view (e.g. both ray methods)
    - Travelled-distance heat map for debugging the marcher

Example:
    >>> from raymarcher.preview.display import show_preview
    >>> from raymarcher.core.frame import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(512, 512)
    >>> image = renderer.render(params)
    >>> show_preview(image, title="Spherinder section")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding for display.

    Args:
        image: Image array in [0, 1] range.
        gamma: Gamma value; 1.0 (the default) leaves the image unchanged.

    Returns:
        Gamma encoded image.
    """
    if gamma == 1.0:
        return image

    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    result = np.power(image, 1.0 / gamma)

    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
    keep_alpha: bool = False,
) -> npt.NDArray[np.float32]:
    """Prepare a rendered frame for display or export.

    Args:
        image: Image of shape (H, W, 3) or (H, W, 4).
        gamma: Gamma encoding applied to the color channels.
        keep_alpha: Keep the alpha channel of RGBA input.

    Returns:
        Image in [0, 1] range with 3 channels (4 if keep_alpha and RGBA).

    Raises:
        ValueError: If the image is not (H, W, 3|4).
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected image of shape (H, W, 3|4), got {image.shape}")

    rgb = apply_gamma(image[:, :, :3].astype(np.float32), gamma)
    result = rgb
    if keep_alpha and image.shape[2] == 4:
        result = np.concatenate([rgb, image[:, :, 3:4].astype(np.float32)], axis=2)

    return np.clip(result, 0.0, 1.0).astype(np.float32)


def show_preview(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a rendered frame as a Matplotlib figure.

    Args:
        image: Rendered frame of shape (H, W, 3|4).
        gamma: Gamma encoding for display.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(image, gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_distance_map(
    distances: npt.NDArray[np.float32],
    *,
    max_distance: float | None = None,
    title: str = "Travelled distance",
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display per-pixel travelled distances as a heat map.

    Args:
        distances: Distances of shape (H, W), as from get_distance_numpy().
        max_distance: Upper end of the color scale; escaped rays saturate.
        title: Figure title.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    heat = ax.imshow(distances, cmap="viridis", vmin=0.0, vmax=max_distance)
    fig.colorbar(heat, ax=ax)
    ax.axis("off")
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.float32],
    image_b: npt.NDArray[np.float32],
    *,
    labels: tuple[str, str] = ("A", "B"),
    gamma: float = 1.0,
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display side-by-side comparison of two frames with difference view.

    Returns:
        RMSE (root mean squared error) between the two displayed images.
    """
    import matplotlib.pyplot as plt

    display_a = process_image_for_display(image_a, gamma=gamma)
    display_b = process_image_for_display(image_b, gamma=gamma)

    # Compute RMSE in display space
    diff = display_a.astype(np.float64) - display_b.astype(np.float64)
    rmse = float(np.sqrt(np.mean(diff**2)))

    diff_amplified = np.clip(np.abs(diff) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
