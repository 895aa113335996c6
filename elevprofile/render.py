"""
render.py – dark, neon-glow elevation profile image

x-axis is the 1-based position index, not metres: features stay evenly
spaced on the image whatever the true spacing. The geodetic distance only
appears in the x-axis title.
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.lines import Line2D

from .config import RenderConfig
from .errors import RenderError
from .models import PlotStyle

log = logging.getLogger("elevprofile.render")

GLOW_COLORS = (
    "#FF00FF", "#FF00CC", "#7FFF00", "#FFFF33", "#00F6FF", "#0052FF",
    "#FF8C00", "#FF5F00", "#FF0000", "#BF00FF", "#8A2BE2", "#9400D3",
)

LABEL_FONTSIZE = 43          # ≈ 15 mm
AXIS_FONTSIZE = 7


class ColorSource(Protocol):
    def choice(self, seq: Sequence[str]) -> str: ...


def choose_style(rng: Optional[ColorSource] = None,
                 cfg: Optional[RenderConfig] = None) -> PlotStyle:
    """Pick the accent colour once per run; `rng` defaults to an unseeded Random."""
    rng = rng or random.Random()
    cfg = cfg or RenderConfig()
    color = str(rng.choice(GLOW_COLORS))
    log.info("Randomly selected glowline color for this run: %s", color)
    return PlotStyle(glow_color=color, background=cfg.background,
                     axis_color=cfg.axis_color, area_color=cfg.area_color)


def draw_glow_line(ax: Axes, x, y, color: str,
                   linewidth: float = 1.2,
                   n_glow_lines: int = 10,
                   diff_linewidth: float = 1.05,
                   alpha_glow: float = 0.4) -> List[Line2D]:
    """Crisp line on top of progressively wider, fainter copies of itself."""
    lines: List[Line2D] = []
    alpha = alpha_glow / n_glow_lines
    for n in range(1, n_glow_lines + 1):
        lines += ax.plot(x, y, color=color, alpha=alpha,
                         linewidth=linewidth + diff_linewidth * n,
                         solid_capstyle="round", zorder=2)
    lines += ax.plot(x, y, color=color, linewidth=linewidth, zorder=3)
    return lines


def _apply_theme(fig, ax: Axes, style: PlotStyle) -> None:
    fig.patch.set_facecolor(style.background)
    ax.set_facecolor(style.background)
    ax.grid(False)
    for spine in ax.spines.values():
        spine.set_visible(False)

    ax.tick_params(axis="y", colors=style.axis_color, labelsize=AXIS_FONTSIZE,
                   width=0.5, pad=2)
    for tick in ax.get_yticklabels():
        tick.set_fontweight("bold")
    ax.tick_params(axis="x", which="both", bottom=False, top=False,
                   labelbottom=False)


def render_profile(profile: pd.DataFrame,
                   label: str,
                   geodetic_distance_m: float,
                   style: PlotStyle,
                   output_path: Union[str, Path],
                   cfg: Optional[RenderConfig] = None) -> Path:
    cfg = cfg or RenderConfig()
    output_path = Path(output_path)

    x = profile["position_index"].to_numpy()
    y = profile["elevation_m"].to_numpy(dtype=float)
    y_min, y_max = float(np.nanmin(y)), float(np.nanmax(y))
    baseline = min(0.0, y_min)
    top = max(0.0, y_max)

    fig, ax = plt.subplots(figsize=(cfg.width_in, cfg.height_in))
    try:
        ax.fill_between(x, y, baseline, color=style.area_color, alpha=0.2,
                        linewidth=0, zorder=1)
        draw_glow_line(ax, x, y, style.glow_color)

        x_center = float(x.max()) / 2
        y_text = y_min + (y_max - y_min) * 0.6
        ax.text(x_center, y_text, label, color=style.glow_color,
                fontsize=LABEL_FONTSIZE, fontweight="bold", alpha=0.8,
                ha="center", va="center", zorder=4)

        ax.set_xlim(x.min(), x.max())
        ax.set_ylim(baseline, top + (top - baseline) * 0.05)
        if cfg.reverse_x:
            ax.invert_xaxis()

        _apply_theme(fig, ax, style)
        ax.set_xlabel(
            f"Geodesic distance = {geodetic_distance_m:.2f} m "
            f"(Path sampled at {len(profile)} points)",
            color=style.axis_color, fontsize=AXIS_FONTSIZE, fontweight="bold",
            labelpad=6,
        )
        ax.set_ylabel("Elevation (m)", color=style.axis_color,
                      fontsize=AXIS_FONTSIZE, fontweight="bold")
        fig.subplots_adjust(left=0.04, right=0.995, top=0.99, bottom=0.06)

        try:
            fig.savefig(output_path, dpi=cfg.dpi, facecolor=style.background)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Cannot write {output_path}: {exc}") from exc
    finally:
        plt.close(fig)

    log.info("Plot successfully saved as %s", output_path)
    return output_path


__all__ = ["GLOW_COLORS", "choose_style", "draw_glow_line", "render_profile"]
