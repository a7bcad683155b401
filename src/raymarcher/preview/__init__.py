"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PNG export and background loading
    interactive: Taichi GGUI-based interactive window

Example:
    >>> from raymarcher.preview import save_png_from_array, show_preview
    >>>
    >>> image = renderer.render(params)
    >>> show_preview(image)
    >>> save_png_from_array(image, "output.png")
"""

from raymarcher.preview.display import (
    apply_gamma,
    process_image_for_display,
    show_comparison,
    show_distance_map,
    show_preview,
)
from raymarcher.preview.export import (
    compute_rmse,
    image_to_uint8,
    load_background,
    save_png_from_array,
)
from raymarcher.preview.interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "show_preview",
    "show_comparison",
    "show_distance_map",
    "apply_gamma",
    "process_image_for_display",
    "save_png_from_array",
    "load_background",
    "image_to_uint8",
    "compute_rmse",
]
