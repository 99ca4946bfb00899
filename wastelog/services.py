"""
Submit-calculation and fetch-history operations

These sit between the transports (views.py) and the store. They classify
failures through the exceptions in exceptions.py and never translate them.
"""

import numpy as np
from django.utils import timezone

from .evaluator import evaluate
from .exceptions import Unauthorized

CHART_LIMIT = 20


def submit_calculation(store, owner_id, isotope, gamma_constant, distance_m,
                       dose_rate_usv_h, mass_g):
    """
    Evaluate one measurement and append it to the owner's log

    The owner check runs first, and an InvalidInput from the evaluator
    means the store is never written.

    Returns:
        The stored WasteRecord
    """
    if owner_id is None:
        raise Unauthorized()
    evaluation = evaluate(isotope, gamma_constant, distance_m, dose_rate_usv_h, mass_g)
    return store.append(owner_id, evaluation)


def fetch_history(store, owner_id):
    """All of the owner's records, newest first"""
    if owner_id is None:
        raise Unauthorized()
    return store.list_by_owner(owner_id)


def summarize_history(records):
    """
    Summary statistics of the density values in a history

    Args:
        records: Sequence of WasteRecords, newest first

    Returns:
        Dict with count, latest, mean, min and max density (Bq/g);
        the statistics are None for an empty history
    """
    if not records:
        return {
            'count': 0,
            'latest_density': None,
            'mean_density': None,
            'min_density': None,
            'max_density': None,
        }

    densities = np.array([r.density_bq_per_g for r in records], dtype=float)
    return {
        'count': int(densities.size),
        'latest_density': float(densities[0]),
        'mean_density': float(np.mean(densities)),
        'min_density': float(np.min(densities)),
        'max_density': float(np.max(densities)),
    }


def chart_series(records, limit=CHART_LIMIT):
    """
    Chart points for the most recent records

    Args:
        records: Sequence of WasteRecords, newest first
        limit: Maximum number of points

    Returns:
        List of (time_label, density) tuples in chronological order
    """
    recent = list(records[:limit])
    recent.reverse()
    return [
        (timezone.localtime(r.created_at).strftime('%H:%M:%S'), r.density_bq_per_g)
        for r in recent
    ]
