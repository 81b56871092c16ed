# envlights/debug_draw.py
"""
Debug visualisations of the partition and the extracted lights
"""
import os

import cv2
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .summed_area_table import luminance


def reinhard_tone_mapping(pixels, exposure=1.0, white_point=1.0, gamma=2.2):
    """
    Map linear HDR radiance to an 8-bit RGB image
    """
    scaled = np.asarray(pixels)[..., :3].astype(np.float32) * exposure
    scaled = np.maximum(scaled, 0.0)
    mapped = scaled / (1.0 + scaled / white_point)
    mapped = mapped ** (1.0 / gamma)
    return (mapped * 255).clip(0, 255).astype(np.uint8)


def auto_exposure(pixels, target_midgray=0.18):
    """Exposure bringing the mean luminance to middle grey"""
    return target_midgray / (float(luminance(pixels).mean()) + 1e-5)


def tone_mapped_bgr(pixels):
    """Auto exposed, tone mapped copy ready for cv2 drawing"""
    rgb = reinhard_tone_mapping(pixels, exposure=auto_exposure(pixels))
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def _pixel(light, width, height):
    u, v = light.centroid
    return (min(int(u * width), width - 1), min(int(v * height), height - 1))


def draw_regions(pixels, regions, color=(0, 255, 0)):
    """Outline every partition region on the tone mapped image"""
    vis = tone_mapped_bgr(pixels)
    for region in regions:
        x, y, w, h = region.rect
        cv2.rectangle(vis, (x, y), (x + w - 1, y + h - 1), color, 1)
    return vis


def draw_lights(pixels, candidates, lights, num_lights=0):
    """
    Candidate centroids as small red dots, merged lights as numbered circles

    Merged lights beyond num_lights (when > 0) are drawn in grey.
    """
    vis = tone_mapped_bgr(pixels)
    height, width = vis.shape[:2]
    radius = max(3, min(width, height) // 64)

    for light in candidates:
        cv2.circle(vis, _pixel(light, width, height), 1, (0, 0, 255), -1)

    for i, light in enumerate(lights):
        x, y, w, h = light.rect
        selected = num_lights <= 0 or i < num_lights
        color = (0, 255, 255) if selected else (128, 128, 128)
        cv2.rectangle(vis, (x, y), (x + w - 1, y + h - 1), color, 1)
        center = _pixel(light, width, height)
        cv2.circle(vis, center, radius, color, 2)
        cv2.putText(vis, str(i), (center[0] + radius, center[1] - radius),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1)

    # horizon
    cv2.line(vis, (0, height // 2), (width - 1, height // 2), (255, 0, 0), 1)
    return vis


def draw_luminance(table):
    """Luminance normalized by the table's min/max, JET colormap"""
    span = table.max_luminance - table.min_luminance
    if span > 0:
        normalized = (table.luminance - table.min_luminance) / span
    else:
        normalized = np.zeros_like(table.luminance)
    return cv2.applyColorMap((normalized * 255).astype(np.uint8), cv2.COLORMAP_JET)


def save_overview_figure(pixels, regions, lights, save_path, num_lights=0):
    """Three panel matplotlib figure: image, partition, lights"""
    fig, axes = plt.subplots(1, 3, figsize=(18, 4))

    axes[0].imshow(reinhard_tone_mapping(pixels, exposure=auto_exposure(pixels)))
    axes[0].set_title("Environment map")

    axes[1].imshow(cv2.cvtColor(draw_regions(pixels, regions), cv2.COLOR_BGR2RGB))
    axes[1].set_title(f"Partition ({len(regions)} regions)")

    axes[2].imshow(cv2.cvtColor(draw_lights(pixels, [], lights, num_lights), cv2.COLOR_BGR2RGB))
    axes[2].set_title(f"Merged lights ({len(lights)})")

    for ax in axes:
        ax.axis('off')

    plt.tight_layout()
    fig.savefig(save_path)
    plt.close(fig)


def debug_draw_lights(output_dir, name, pixels, table, regions, candidates, lights, num_lights=0):
    """
    Write every debug image for one extraction

    Returns:
        List of written file paths
    """
    os.makedirs(output_dir, exist_ok=True)
    written = []

    images = {
        f"{name}_regions.png": draw_regions(pixels, regions),
        f"{name}_lights.png": draw_lights(pixels, candidates, lights, num_lights),
        f"{name}_luminance.png": draw_luminance(table),
    }
    for filename, image in images.items():
        path = os.path.join(output_dir, filename)
        cv2.imwrite(path, image)
        written.append(path)

    path = os.path.join(output_dir, f"{name}_overview.png")
    save_overview_figure(pixels, regions, lights, path, num_lights)
    written.append(path)

    return written
