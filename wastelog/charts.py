"""
History chart rendering

Draws the density history as a PNG bar chart with matplotlib's
non-interactive backend so it can be served straight from a view.
"""

import io

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt


BAR_COLOR = '#2563eb'


def render_density_chart(series, title='Density history (latest calculations)'):
    """
    Render density per calculation as a bar chart

    Args:
        series: List of (time_label, density_bq_per_g) in chronological order
        title: Chart title

    Returns:
        PNG image bytes
    """
    fig, ax = plt.subplots(figsize=(10, 4))
    try:
        if series:
            labels = [label for label, _ in series]
            densities = [density for _, density in series]
            positions = range(len(series))

            ax.bar(positions, densities, color=BAR_COLOR)
            ax.set_xticks(list(positions))
            ax.set_xticklabels(labels, rotation=45, ha='right', fontsize=8)
            ax.set_ylabel('Density (Bq/g)', fontsize=10)
            ax.grid(True, axis='y', alpha=0.3)
        else:
            ax.text(0.5, 0.5, 'No calculations saved yet', ha='center', va='center',
                    transform=ax.transAxes, fontsize=12, color='#6b7280')
            ax.set_xticks([])
            ax.set_yticks([])

        ax.set_title(title, fontsize=12)
        fig.tight_layout()

        buffer = io.BytesIO()
        fig.savefig(buffer, format='png', dpi=100)
        return buffer.getvalue()
    finally:
        plt.close(fig)
