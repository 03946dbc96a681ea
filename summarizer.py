# backend/summarizer.py
import json
import logging
import re
from itertools import cycle
from typing import Any, List

from openai import OpenAI

from config import Settings
from errors import InvalidRequest, InvalidUpstreamResponse, ServiceUnavailable
from models import Summary, ensure_summary_shape

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a meeting notes summarizer. Output STRICT JSON only with keys: "
    "points (string[]), decisions (string[]), action_items (array of {owner, task, due}). "
    "No prose or markdown."
)

FRAGMENT_SPLIT = re.compile(r"\r?\n|[.?!]\s+")
CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
DECISION_WORDS = re.compile(r"\b(decision|decided|decide|agree[sd]?|approved?|demo)\b", re.IGNORECASE)
WEEKDAY = re.compile(r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b", re.IGNORECASE)
DUE_WORDS = re.compile(r"\b(due|deliver|delivers|deadline)\b", re.IGNORECASE)

MOCK_OWNERS = ("John", "Sarah", "Priya", "Alex")
PLACEHOLDER_DECISIONS = ["Proceed with current timeline."]
PLACEHOLDER_ACTIONS = [
    {"owner": "John", "task": "Finish API integration", "due": "Friday"},
    {"owner": "Sarah", "task": "Design frontend UI", "due": "Wednesday"},
]


def split_fragments(transcript: str) -> List[str]:
    """Split a transcript into trimmed, non-empty sentences/lines."""
    return [s.strip() for s in FRAGMENT_SPLIT.split(str(transcript)) if s.strip()]


def strip_code_fences(text: str) -> str:
    return CODE_FENCE.sub("", text.strip())


class MockSummarizer:
    """Builds a summary from the transcript itself, without any network call."""

    def __init__(self, max_points: int = 6):
        self.max_points = max_points

    def summarize(self, transcript: str) -> dict:
        fragments = split_fragments(transcript)

        decisions = [f for f in fragments if DECISION_WORDS.search(f)]

        owners = cycle(MOCK_OWNERS)
        action_items = []
        for fragment in fragments:
            day = WEEKDAY.search(fragment)
            if day or DUE_WORDS.search(fragment):
                action_items.append({
                    "owner": next(owners),
                    "task": fragment,
                    "due": day.group(1).capitalize() if day else "TBD",
                })

        return {
            "points": fragments[: self.max_points],
            "decisions": decisions or list(PLACEHOLDER_DECISIONS),
            "action_items": action_items or [dict(a) for a in PLACEHOLDER_ACTIONS],
        }


class LLMSummarizer:
    """Asks an OpenAI-compatible chat completion endpoint for a JSON summary."""

    def __init__(self, client: Any, model: str, temperature: float = 0.2):
        self.client = client
        self.model = model
        self.temperature = temperature

    @staticmethod
    def build_messages(transcript: str, instruction: str) -> List[dict]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Instruction: {instruction}\n\nTranscript:\n{transcript}\n\nReturn STRICT JSON only.",
            },
        ]

    def summarize(self, transcript: str, instruction: str) -> Any:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(transcript, instruction),
                temperature=self.temperature,
            )
            content = completion.choices[0].message.content if completion.choices else None
        except Exception as exc:
            logger.exception("LLM request failed")
            raise ServiceUnavailable() from exc

        text = strip_code_fences((content or "").strip() or "{}")
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from LLM: %s", text)
            raise InvalidUpstreamResponse(text) from exc


class SummaryService:
    """Chooses the mock or LLM path and normalizes whatever comes back."""

    def __init__(self, settings: Settings, llm_client: Any = None):
        self.settings = settings
        self.mock = MockSummarizer(settings.mock_max_points)
        self.llm = None
        if not settings.mock_mode:
            client = llm_client or OpenAI(api_key=settings.llm_api_key, base_url=settings.llm_base_url)
            self.llm = LLMSummarizer(client, settings.llm_model, settings.llm_temperature)

    def generate(self, transcript: Any, instruction: Any) -> Summary:
        if not _present(transcript) or not _present(instruction):
            raise InvalidRequest("Transcript and instruction are required")

        if self.llm is None:
            logger.info("Generating mock summary (%d chars)", len(transcript))
            raw = self.mock.summarize(transcript)
        else:
            logger.info("Generating LLM summary with %s (%d chars)", self.llm.model, len(transcript))
            raw = self.llm.summarize(transcript, instruction)

        return ensure_summary_shape(raw)


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
