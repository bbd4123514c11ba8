"""Price measurements taken on a chart (pullbacks, breakouts, ...).

Pure computation: the percentage change is always derived from the two
prices and never trusted from input.
"""

from collections.abc import Iterable, Mapping

from tradejournal.utils.numbers import to_optional_float


def percentage_change(start_price, end_price) -> float | None:
    """Percent move from start to end, rounded to 2 dp.

    None when either price is missing, zero or not numeric.
    """
    start = to_optional_float(start_price)
    end = to_optional_float(end_price)
    if not start or not end:
        return None
    return round((end - start) / start * 100, 2)


def derive_measurements(measurements: Iterable | None) -> list[dict]:
    """Return JSON-ready measurement records with `percentage_change` filled in."""
    records = []
    for item in measurements or []:
        if not isinstance(item, Mapping):
            continue
        start = to_optional_float(item.get("start_price"))
        end = to_optional_float(item.get("end_price"))
        records.append({
            "name": item.get("name"),
            "start_price": start,
            "end_price": end,
            "percentage_change": percentage_change(start, end),
        })
    return records


def collect_tags(tag_lists: Iterable[Iterable[str] | None]) -> list[str]:
    """Sorted union of the tags across a set of charts."""
    tags = set()
    for chart_tags in tag_lists:
        for tag in chart_tags or []:
            if isinstance(tag, str) and tag.strip():
                tags.add(tag.strip())
    return sorted(tags)
