"""Deduplication logic - Pure functions.

The feed window overlaps from one cycle to the next, so the same event
is seen repeatedly; persistence handles that with an upsert keyed by
external id. This module only collapses duplicates inside one batch.
"""

from quakewatch.core.earthquake import EarthquakeEvent


def collapse_revisions(events: list[EarthquakeEvent]) -> list[EarthquakeEvent]:
    """Keep one event per external ID, preferring the latest revision.

    Pure function. Ties on ``updated_at`` keep the later item in the batch.

    Args:
        events: Events, possibly repeating an external ID

    Returns:
        Events with unique IDs, in order of first appearance
    """
    latest: dict[str, EarthquakeEvent] = {}

    for event in events:
        current = latest.get(event.external_id)
        if current is None or event.updated_at >= current.updated_at:
            latest[event.external_id] = event

    return list(latest.values())
