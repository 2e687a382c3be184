"""Display colors and shapes for clusters.

Clusters cycle through every hue, then every hue again with the next shape,
and only once all hue/shape pairs are used does saturation start dropping.
"""
from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass
from enum import Enum
from typing import List


class VertexShape(str, Enum):
    DISK = "Disk"
    SOLID_SQUARE = "Solid Square"
    SOLID_DIAMOND = "Solid Diamond"
    SOLID_TRIANGLE = "Solid Triangle"
    SPHERE = "Sphere"


HUES = (240.0, 0.0, 200.0, 120.0, 300.0, 180.0, 60.0)
SHAPES = (
    VertexShape.DISK,
    VertexShape.SOLID_SQUARE,
    VertexShape.SOLID_DIAMOND,
    VertexShape.SOLID_TRIANGLE,
    VertexShape.SPHERE,
)

START_SATURATION = 1.0
END_SATURATION = 0.2
LIGHTNESS = 0.5


@dataclass(frozen=True)
class ClusterStyle:
    color: str  # "#rrggbb"
    shape: VertexShape


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness, saturation)
    return "#{:02x}{:02x}{:02x}".format(*(int(round(channel * 255)) for channel in (r, g, b)))


def cluster_style(cluster_index: int, total_clusters: int) -> ClusterStyle:
    """Style of the zero-based ``cluster_index`` out of ``total_clusters``."""
    if not 0 <= cluster_index < max(total_clusters, 1):
        raise ValueError(f"cluster_index {cluster_index} out of range for {total_clusters} clusters")

    hues = len(HUES)
    shapes = len(SHAPES)
    saturations = max(1, math.ceil(total_clusters / (hues * shapes)))

    dividend, hue_index = divmod(cluster_index, hues)
    saturation_index, shape_index = divmod(dividend, shapes)

    saturation = START_SATURATION + (saturation_index / saturations) * (END_SATURATION - START_SATURATION)
    return ClusterStyle(
        color=hsl_to_hex(HUES[hue_index], saturation, LIGHTNESS),
        shape=SHAPES[shape_index],
    )


def cluster_styles(total_clusters: int) -> List[ClusterStyle]:
    return [cluster_style(index, total_clusters) for index in range(total_clusters)]
