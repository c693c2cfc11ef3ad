"""Plot the integration contour together with the computed eigenvalues."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np

from pyfeast.numerics.contour import Contour


@dataclass
class ContourPlotter:
    """Draws the contour curve, its quadrature nodes and eigenvalue markers."""

    curve_points: int = 400

    def plot(self, contour: Contour, eigenvalues: Iterable[complex] = (), *,
             title: str = "FEAST contour", output_path: Optional[str] = None):
        angles = np.linspace(0.0, 2.0 * np.pi, self.curve_points)
        curve = np.array([contour.point(t)[0] for t in angles])
        values = np.asarray(tuple(eigenvalues), dtype=complex)

        fig, ax = plt.subplots(figsize=(7, 5))
        ax.plot(curve.real, curve.imag, lw=1.2, label="contour")
        ax.scatter(contour.nodes.real, contour.nodes.imag, s=18, marker="o",
                   label=f"nodes ({len(contour)})")
        if values.size:
            ax.scatter(values.real, values.imag, s=30, marker="x", color="crimson",
                       label=f"eigenvalues ({values.size})")
        ax.set_xlabel("Re(z)")
        ax.set_ylabel("Im(z)")
        ax.set_title(title)
        ax.set_aspect("equal", adjustable="datalim")
        ax.legend()
        ax.grid(True, linestyle="--", alpha=0.4)

        if output_path:
            fig.savefig(output_path, dpi=200, bbox_inches="tight")
        return fig


def plot_contour(contour: Contour, eigenvalues: Iterable[complex] = (), *,
                 title: str = "FEAST contour", output_path: Optional[str] = None) -> None:
    """Convenience wrapper around :class:`ContourPlotter`; closes the figure."""
    fig = ContourPlotter().plot(contour, eigenvalues, title=title, output_path=output_path)
    plt.close(fig)
