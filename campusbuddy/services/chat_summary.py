"""
Chat summary report.

Keyword bucketing over a bounded window of messages, rendered as a fixed
text template. Deterministic: the same messages always give the same report.
"""
import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence, Tuple

GENERAL_TOPIC = "general"

# Ordered; ties in topic counts resolve in this order
TOPICS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("exams", ("exam", "midterm", "final", "quiz", "test", "viva")),
    ("assignments", ("assignment", "homework", "submission", "submit", "project", "lab report")),
    ("classes", ("class", "lecture", "course", "professor", "timetable", "section")),
    ("study groups", ("study group", "group study", "study session", "revision", "notes")),
    ("facilities", ("library", "cafeteria", "cafe", "wifi", "gym", "hostel", "parking", "lab")),
    ("events", ("event", "fest", "workshop", "seminar", "competition", "party", "society")),
    ("announcements", ("announcement", "notice", "schedule", "postponed", "cancelled", "update")),
)

INTERROGATIVES = frozenset({
    "what", "when", "where", "who", "whom", "why", "how", "which",
    "is", "are", "can", "could", "does", "do", "did", "will", "would", "should", "anyone",
})

IMPORTANT_MARKERS = ("important", "reminder", "deadline", "urgent", "due", "don't forget")

MAX_TOPICS = 3
MAX_QUOTES = 3
MAX_PARTICIPANTS = 3
MAX_QUESTIONS = 5
MAX_NOTES = 5
QUOTE_LENGTH = 80

_TOKEN = re.compile(r"[a-z']+")


@dataclass(frozen=True)
class SummaryLine:
    """The parts of a message the report uses"""
    author_name: str
    author_batch: str
    content: str
    timestamp: int


def _mentions(text: str, keyword: str) -> bool:
    if " " in keyword:
        return keyword in text
    return re.search(rf"\b{re.escape(keyword)}", text) is not None


def topics_for(content: str) -> List[str]:
    """Every topic whose keywords the message mentions, or `general`"""
    text = content.lower()
    matched = [name for name, keywords in TOPICS if any(_mentions(text, k) for k in keywords)]
    return matched or [GENERAL_TOPIC]


def is_question(content: str) -> bool:
    if "?" in content:
        return True
    tokens = _TOKEN.findall(content.lower())
    return bool(tokens) and tokens[0] in INTERROGATIVES


def is_important(content: str) -> bool:
    text = content.lower()
    return any(_mentions(text, marker) for marker in IMPORTANT_MARKERS)


def quote(content: str) -> str:
    text = " ".join(content.split())
    if len(text) > QUOTE_LENGTH:
        return text[:QUOTE_LENGTH - 3].rstrip() + "..."
    return text


def format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def bucket_by_topic(lines: Sequence[SummaryLine]) -> Dict[str, List[SummaryLine]]:
    buckets: Dict[str, List[SummaryLine]] = {}
    for line in lines:
        for topic in topics_for(line.content):
            buckets.setdefault(topic, []).append(line)
    return buckets


def _ranked_topics(buckets: Dict[str, List[SummaryLine]]) -> List[Tuple[str, List[SummaryLine]]]:
    order = [name for name, _ in TOPICS] + [GENERAL_TOPIC]
    present = [(name, buckets[name]) for name in order if buckets.get(name)]
    # sorted() is stable, so equal counts keep taxonomy order
    return sorted(present, key=lambda item: -len(item[1]))[:MAX_TOPICS]


def _ranked_participants(lines: Sequence[SummaryLine]) -> List[Tuple[str, str, int]]:
    counts: Counter = Counter()
    batches: Dict[str, str] = {}
    for line in lines:
        counts[line.author_name] += 1
        batches.setdefault(line.author_name, line.author_batch)
    # Counter.most_common keeps first-seen order among equal counts
    return [(name, batches[name], n) for name, n in counts.most_common(MAX_PARTICIPANTS)]


def _bullets(lines: Iterable[SummaryLine], limit: int) -> List[str]:
    return [f"- {line.author_name}: {quote(line.content)}" for line in list(lines)[:limit]]


def render_summary(lines: Sequence[SummaryLine]) -> str:
    """Render the report for messages in any order (sorted chronologically here)"""
    ordered = sorted(lines, key=lambda line: line.timestamp)
    participants = {line.author_name for line in ordered}

    out: List[str] = [
        f"Chat Summary ({len(ordered)} messages from {len(participants)} participants)",
        "",
        "Overview",
        f"- Messages: {len(ordered)}",
        f"- Participants: {len(participants)}",
    ]
    if ordered:
        out.append(
            f"- Time span: {format_time(ordered[0].timestamp)} to {format_time(ordered[-1].timestamp)} UTC"
        )

    topics = _ranked_topics(bucket_by_topic(ordered))
    if topics:
        out += ["", "Main Topics"]
        for name, topic_lines in topics:
            noun = "message" if len(topic_lines) == 1 else "messages"
            out.append(f"- {name.title()} ({len(topic_lines)} {noun})")
            for line in topic_lines[:MAX_QUOTES]:
                out.append(f'  > "{line.author_name}: {quote(line.content)}"')

    ranked = _ranked_participants(ordered)
    if ranked:
        out += ["", "Most Active Participants"]
        for name, batch, count in ranked:
            label = f"{name} ({batch})" if batch else name
            noun = "message" if count == 1 else "messages"
            out.append(f"- {label}: {count} {noun}")

    questions = _bullets((line for line in ordered if is_question(line.content)), MAX_QUESTIONS)
    if questions:
        out += ["", "Questions"] + questions

    notes = _bullets((line for line in ordered if is_important(line.content)), MAX_NOTES)
    if notes:
        out += ["", "Important Notes"] + notes

    out += ["", "Conversation Flow"]
    if ordered:
        first, last = ordered[0], ordered[-1]
        out.append(f'- Started with {first.author_name}: "{quote(first.content)}"')
        out.append(f'- Ended with {last.author_name}: "{quote(last.content)}"')

    return "\n".join(out)
