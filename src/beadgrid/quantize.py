"""
Color reduction by seeded k-means in RGB space.

Seeding is fully determined by explicit inputs: the colors being reduced,
their optional frequencies, and a ``QuantizationContext`` carrying the
reference palette fixed by the first image of a session.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from .color import RGB, Color, hex_to_rgb, nearest_indices, normalize_hex, rgb_to_hex, unique_colors

MAX_ITERATIONS = 50


def _by_frequency(frequencies: Dict[Color, int]) -> List[Color]:
    """Colors sorted by count descending, ties kept in mapping order."""
    return [color for color, _ in sorted(frequencies.items(), key=lambda item: -item[1])]


@dataclass
class QuantizationContext:
    """
    Session state that steers centroid seeding.

    Attributes:
        reference_palette: Colors fixed from the first processed image, most
            frequent first. None until an image has been recorded.
        reference_frequencies: Histogram of that first image.
        source_frequencies: Histogram of the most recently processed image,
            used to backfill seeds.
    """
    reference_palette: Optional[List[Color]] = None
    reference_frequencies: Dict[Color, int] = field(default_factory=dict)
    source_frequencies: Dict[Color, int] = field(default_factory=dict)

    @property
    def has_reference(self) -> bool:
        return bool(self.reference_palette)

    def record_image(self, histogram: Dict[str, int]):
        """Remember an image's color histogram; the first one fixes the reference palette."""
        counts = {normalize_hex(c): n for c, n in histogram.items()}
        self.source_frequencies = dict(counts)
        if self.reference_palette is None and counts:
            self.reference_frequencies = dict(counts)
            self.reference_palette = _by_frequency(counts)

    def reset(self):
        self.reference_palette = None
        self.reference_frequencies = {}
        self.source_frequencies = {}


class ColorQuantizer:
    """Reduces a color set to exactly ``k`` representatives."""

    def __init__(self, max_iterations: int = MAX_ITERATIONS):
        """Initialize quantizer with an iteration safety bound."""
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.max_iterations = max_iterations
        self.last_iterations = 0
        self.last_converged = False

    def reduce_colors(self, colors: Iterable[str], k: int,
                      context: Optional[QuantizationContext] = None,
                      frequencies: Optional[Dict[str, int]] = None) -> List[Color]:
        """
        Reduce ``colors`` to ``k`` colors.

        Args:
            colors: Colors to reduce; duplicates collapse to first occurrence
            k: Target number of colors (>= 1)
            context: Session seeding state, optional
            frequencies: Usage count per color used to rank seeds, optional

        Returns:
            The input colors unchanged when there are at most ``k`` of them,
            otherwise exactly ``k`` centroid colors in centroid order
        """
        if k < 1:
            raise ValueError(f"Target color count must be at least 1, got {k}")

        palette = unique_colors(colors)
        if len(palette) <= k:
            self.last_iterations = 0
            self.last_converged = True
            return palette

        counts = {normalize_hex(c): n for c, n in (frequencies or {}).items()}
        seeds = self._seed_centroids(palette, k, context, counts)
        centroids = self._run_kmeans([hex_to_rgb(c) for c in palette], seeds)
        return [rgb_to_hex(*centroid) for centroid in centroids]

    def _seed_centroids(self, palette: List[Color], k: int,
                        context: Optional[QuantizationContext],
                        counts: Dict[Color, int]) -> List[RGB]:
        """Pick ``k`` starting centroids in priority order."""
        seeds: List[Color] = []

        def add_from(candidates: Iterable[Color]):
            for color in candidates:
                if len(seeds) >= k:
                    return
                if color not in seeds:
                    seeds.append(color)

        if context is not None and context.has_reference:
            add_from(context.reference_palette)
        else:
            # Most frequent first; sorted() keeps first-seen order on ties
            add_from(sorted(palette, key=lambda c: -counts.get(c, 0)))

        # Backfill from the recorded image colors, then from the input itself
        if len(seeds) < k and context is not None:
            add_from(_by_frequency(context.source_frequencies))
        if len(seeds) < k:
            add_from(sorted(palette, key=lambda c: -counts.get(c, 0)))

        # Degenerate input: reuse seeds rather than fail
        i = 0
        while len(seeds) < k:
            seeds.append(seeds[i % len(seeds)])
            i += 1

        return [hex_to_rgb(c) for c in seeds]

    def _run_kmeans(self, points: List[RGB], centroids: List[RGB]) -> List[RGB]:
        """Refine centroids until assignments stop changing or the bound is hit."""
        pixels = np.array(points, dtype=np.int64).reshape(-1, 3)
        centers = np.array(centroids, dtype=np.int64).reshape(-1, 3)
        k = len(centers)
        assignments = np.full(len(pixels), -1, dtype=np.int64)
        iterations = 0
        changed = True

        while changed and iterations < self.max_iterations:
            iterations += 1

            # Assign each point to its nearest centroid, lowest index on ties
            nearest = nearest_indices(pixels, centers)
            changed = not np.array_equal(nearest, assignments)
            assignments = nearest

            # Move each non-empty cluster to the rounded mean of its members
            counts = np.bincount(assignments, minlength=k)
            sums = np.zeros((k, 3), dtype=np.int64)
            np.add.at(sums, assignments, pixels)
            occupied = counts > 0
            centers[occupied] = _rounded_mean(sums[occupied], counts[occupied][:, np.newaxis])

        self.last_iterations = iterations
        self.last_converged = not changed
        return [tuple(int(v) for v in center) for center in centers]


def _rounded_mean(total, count):
    """Integer mean rounded half up."""
    return (2 * total + count) // (2 * count)


def build_replacement_map(old_colors: Iterable[str], new_colors: List[str]) -> Dict[Color, Color]:
    """Map every old color to its nearest new color."""
    targets = [normalize_hex(c) for c in new_colors]
    if not targets:
        raise ValueError("Replacement colors must not be empty")

    sources = unique_colors(old_colors)
    if not sources:
        return {}
    nearest = nearest_indices([hex_to_rgb(c) for c in sources], [hex_to_rgb(c) for c in targets])
    return {color: targets[int(idx)] for color, idx in zip(sources, nearest)}
