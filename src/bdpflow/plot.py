from typing import Sequence

from matplotlib.figure import Figure

from .output import SampleRow

DPI = 100


def plot_samples(rows: Sequence[SampleRow], output_path: str) -> None:
    """
    Render delivery rate against RTT as an 800x600 PNG.

    Points are colored by their position in the trace.
    """
    if not rows:
        raise ValueError("No samples to plot")

    figure = Figure(figsize=(800 / DPI, 600 / DPI), dpi=DPI)
    ax = figure.subplots()
    points = ax.scatter(
        [row.delivery_rate for row in rows],
        [row.rtt for row in rows],
        c=list(range(len(rows))),
        marker="+",
        s=9,
    )
    figure.colorbar(points, ax=ax, label="sample")
    ax.set_xlabel("bandwidth (bps)")
    ax.set_ylabel("rtt (usec)")
    figure.savefig(output_path, format="png")
