# utils.py

import zlib

import plotly.graph_objects as go

from engine import FREE_LABEL

FREE_COLOR = "lightgray"


def get_color(owner):
    """Return a color for a block owner; free blocks are grey."""
    if owner is None or owner == FREE_LABEL:
        return FREE_COLOR
    # stable pastel per process so a block keeps its color across reruns
    return f"hsl({zlib.crc32(owner.encode()) % 360}, 70%, 75%)"


def format_status(free_space, report):
    lines = [f"Total available space: {free_space}"]
    for start, end, owner in report:
        lines.append(f"Addresses [{start} : {end}) -> Process: {owner}")
    return lines


def build_layout_figure(report, capacity, height=180):
    """
    Draw the address space as one horizontal bar split into blocks.

    Args:
        report: ``(start, end, owner)`` tuples in address order
        capacity: total size of the address space
        height: figure height in pixels

    Returns:
        go.Figure: one trace per block, so each keeps its own hover text
    """
    fig = go.Figure()

    for start, end, owner in report:
        text = f"{owner} [{start}, {end})"
        fig.add_trace(go.Bar(
            x=[end - start],
            y=["Memory"],
            base=[start],
            orientation="h",
            name=owner,
            text=owner,
            hovertext=text,
            hoverinfo="text",
            marker_color=get_color(owner),
            marker_line_color="black",
            marker_line_width=1,
        ))

    fig.update_layout(
        barmode="overlay",
        height=height,
        showlegend=False,
        xaxis=dict(range=[0, capacity], title="Address"),
        yaxis=dict(showticklabels=False),
    )
    return fig
