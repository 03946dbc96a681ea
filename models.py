# backend/models.py
import json
from pydantic import BaseModel, Field
from typing import Any, Iterable, List, Optional, Union

DEFAULT_OWNER = "Unassigned"


class ActionItem(BaseModel):
    owner: str = DEFAULT_OWNER
    task: str = ""
    due: str = ""


class Summary(BaseModel):
    points: List[str] = Field(default_factory=list)
    decisions: List[str] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)


class GenerateSummaryRequest(BaseModel):
    transcript: Optional[str] = None
    instruction: Optional[str] = None


class SendSummaryRequest(BaseModel):
    summary: Any = None
    recipients: Union[List[str], str, None] = None


class SummaryResponse(BaseModel):
    summary: Summary


class SendSummaryResponse(BaseModel):
    message: str
    previewUrl: str


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, BaseModel):
        return getattr(obj, key, None)
    if isinstance(obj, dict):
        return obj.get(key)
    return None


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [text for text in map(_as_text, value) if text is not None]


def _action_item(value: Any) -> ActionItem:
    owner = _as_text(_get(value, "owner"))
    task = _as_text(_get(value, "task"))
    due = _as_text(_get(value, "due"))
    return ActionItem(owner=owner or DEFAULT_OWNER, task=task or "", due=due or "")


def ensure_summary_shape(value: Any) -> Summary:
    """Coerce any value into a well-formed Summary.

    Wrong-typed or missing fields are replaced with empty lists; this never
    raises, whatever the caller (or the LLM) handed us.
    """
    items = _get(value, "action_items")
    return Summary(
        points=_string_list(_get(value, "points")),
        decisions=_string_list(_get(value, "decisions")),
        action_items=[_action_item(a) for a in items] if isinstance(items, (list, tuple)) else [],
    )


# Plain-text editing format used by the client: one entry per line,
# action items as "owner | task | due".

def lines_to_text(items: Iterable[str]) -> str:
    return "\n".join(items)


def text_to_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def action_items_to_text(items: Iterable[ActionItem]) -> str:
    return "\n".join(f"{a.owner} | {a.task} | {a.due}" for a in items)


def action_items_from_text(text: str) -> List[ActionItem]:
    parsed = []
    for line in text_to_lines(text):
        owner, task, due = ([part.strip() for part in line.split("|")] + ["", "", ""])[:3]
        parsed.append(ActionItem(owner=owner or DEFAULT_OWNER, task=task, due=due))
    return parsed


def parse_recipients(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [r.strip() for r in value if isinstance(r, str) and r.strip()]
