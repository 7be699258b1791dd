"""Translate a TaskQuery into a Notion database filter and sort order.

Notion compound filters only combine leaf conditions with ``and``/``or`` and
allow limited nesting, so everything produced here is either a flat ``and``
group or an ``or`` of flat ``and`` groups. Constraints that apply to every
branch of an ``or`` are distributed into each branch:

    (A OR B) AND C  ->  (A AND C) OR (B AND C)
"""

from typing import Any, Optional

from src.models.date_window import DateWindow
from src.models.task_query import TaskQuery
from src.utils.settings import Settings, get_settings

Filter = dict[str, Any]


def and_group(*conditions: Filter) -> Filter:
    """Flat ``and`` group. Nested ``and`` groups are inlined."""
    flat: list[Filter] = []
    for condition in conditions:
        if set(condition) == {"and"}:
            flat.extend(condition["and"])
        else:
            flat.append(condition)
    return {"and": flat}


def or_group(*branches: Filter) -> Filter:
    return {"or": list(branches)}


def distribute(or_filter: Filter, conditions: list[Filter]) -> Filter:
    """AND ``conditions`` into every branch of ``or_filter``.

    Returns an ``or`` of flat ``and`` groups equivalent to
    ``AND(or_filter, *conditions)``.
    """
    if not conditions:
        return or_filter
    return or_group(*(and_group(branch, *conditions) for branch in or_filter["or"]))


def state_not_equals(value: str, settings: Settings) -> Filter:
    field_type = settings.property_types.state
    return {
        "property": settings.properties.state,
        field_type: {"does_not_equal": value},
    }


def date_on_or_after(day, settings: Settings) -> Filter:
    return {"property": settings.properties.date, "date": {"on_or_after": day.isoformat()}}


def date_on_or_before(day, settings: Settings) -> Filter:
    return {"property": settings.properties.date, "date": {"on_or_before": day.isoformat()}}


def tag_matches(property_name: str, field_type: str, value: str) -> Filter:
    """Membership test for a multi-select (``contains``) or select (``equals``) field."""
    operator = "contains" if field_type == "multi_select" else "equals"
    return {"property": property_name, field_type: {operator: value}}


def window_conditions(window: DateWindow, settings: Settings) -> list[Filter]:
    return [
        date_on_or_after(window.start, settings),
        date_on_or_before(window.end, settings),
    ]


def extra_conditions(query: TaskQuery, settings: Settings) -> list[Filter]:
    """Tag and category constraints requested by the view."""
    conditions = []
    if query.cat_tag:
        conditions.append(tag_matches(
            settings.properties.cat_tag, settings.property_types.cat_tag, query.cat_tag
        ))
    if query.cat:
        conditions.append(tag_matches(
            settings.properties.cat, settings.property_types.cat, query.cat
        ))
    return conditions


def build_range_filter(query: TaskQuery, settings: Settings) -> Filter:
    """Non-canceled tasks dated inside the window, as one flat ``and`` group."""
    return and_group(
        state_not_equals(settings.defaults.canceled_state, settings),
        *window_conditions(query.window, settings),
        *extra_conditions(query, settings),
    )


def build_fiscal_year_filter(query: TaskQuery, settings: Settings) -> Filter:
    """Active tasks of any date, or any task dated inside the fiscal year.

    Tag/category constraints are distributed into both branches rather than
    wrapped around the ``or``.
    """
    active = and_group(
        state_not_equals(settings.defaults.done_state, settings),
        state_not_equals(settings.defaults.canceled_state, settings),
    )
    dated = and_group(*window_conditions(query.window, settings))
    return distribute(or_group(active, dated), extra_conditions(query, settings))


def build_filter(query: TaskQuery, settings: Optional[Settings] = None) -> Filter:
    """Notion filter for ``query``."""
    settings = settings or get_settings()
    if query.mode == "fiscal_year":
        return build_fiscal_year_filter(query, settings)
    return build_range_filter(query, settings)


def build_sorts(settings: Optional[Settings] = None) -> list[dict[str, str]]:
    """Ascending by date; records without a date use Notion's own ordering."""
    settings = settings or get_settings()
    return [{"property": settings.properties.date, "direction": "ascending"}]
