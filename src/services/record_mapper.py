"""Normalize raw Notion page objects into Task models.

Property types are a database configuration choice, so each logical field is
read through an ordered list of extraction attempts; the first one that finds
a value wins. Nothing in here raises on an unexpected shape.
"""

from typing import Any, Callable, Iterable, Optional

from notion_client.helpers import is_full_page

from src.models.task import Task
from src.utils.settings import Settings, get_settings
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

Extractor = Callable[[dict], Any]


def is_full_page_record(record: Any) -> bool:
    """True for a complete page object carrying a properties bag."""
    return (
        isinstance(record, dict)
        and is_full_page(record)
        and isinstance(record.get("properties"), dict)
    )


def first_match(prop: Any, extractors: Iterable[Extractor], default: Any) -> Any:
    """Return the first non-empty value produced by ``extractors``."""
    if not isinstance(prop, dict):
        return default
    for extract in extractors:
        try:
            value = extract(prop)
        except (AttributeError, KeyError, IndexError, TypeError):
            continue
        if value:
            return value
    return default


def _status_name(prop: dict) -> Optional[str]:
    return prop["status"]["name"]


def _select_name(prop: dict) -> Optional[str]:
    return prop["select"]["name"]


def _multi_select_names(prop: dict) -> list[str]:
    return [option["name"] for option in prop["multi_select"] if option.get("name")]


def _select_as_list(prop: dict) -> list[str]:
    name = prop["select"]["name"]
    return [name] if name else []


def _plain_text(segments: Any) -> str:
    if not isinstance(segments, list):
        return ""
    return "".join(
        segment.get("plain_text", "") for segment in segments if isinstance(segment, dict)
    )


def read_title(prop: Any, placeholder: str) -> str:
    return first_match(prop, [lambda p: _plain_text(p["title"])], placeholder)


def read_state(prop: Any) -> str:
    """Structured status first, then single select."""
    return first_match(prop, [_status_name, _select_name], "Unknown")


def read_tags(prop: Any) -> list[str]:
    """Multi-select names in selection order, else a single select as a one-element list."""
    return first_match(prop, [_multi_select_names, _select_as_list], [])


def read_date(prop: Any) -> Optional[str]:
    return first_match(prop, [lambda p: p["date"]["start"]], None)


def read_summary(prop: Any) -> str:
    """First rich-text segment only."""
    return first_match(prop, [lambda p: p["rich_text"][0]["plain_text"]], "")


def map_record(record: dict, settings: Optional[Settings] = None) -> Task:
    """Map one full page object to a Task."""
    settings = settings or get_settings()
    names = settings.properties
    props = record.get("properties") or {}

    return Task(
        id=record["id"],
        name=read_title(props.get(names.name), settings.defaults.untitled),
        date=read_date(props.get(names.date)),
        state=read_state(props.get(names.state)),
        cats=read_tags(props.get(names.cat)),
        sub_cats=read_tags(props.get(names.sub_cat)),
        cat_tag=read_tags(props.get(names.cat_tag)),
        summary=read_summary(props.get(names.summary)),
        url=record.get("url") or "",
    )


def map_records(records: Iterable[Any], settings: Optional[Settings] = None) -> list[Task]:
    """Map every full page object, discarding partial or error-shaped results."""
    settings = settings or get_settings()
    tasks = []
    skipped = 0
    for record in records:
        if not is_full_page_record(record) or not record.get("id"):
            skipped += 1
            continue
        tasks.append(map_record(record, settings))

    if skipped:
        logger.warning("Discarded non-page records", skipped=skipped, mapped=len(tasks))
    return tasks
