"""Annotations derived from finalized message text at send time."""
from __future__ import annotations

import re
from dataclasses import dataclass

MENTION_RE = re.compile(r"@(\w+)", re.ASCII)
DOCUMENT_REF_RE = re.compile(r"#([A-Za-z0-9]+)")

TASK_TRIGGER_PHRASES: tuple[str, ...] = (
    "te rog să",
    "îmi poți",
    "poți să",
    "ai putea să",
)


@dataclass(frozen=True, slots=True)
class Annotations:
    mentions: tuple[str, ...]
    document_refs: tuple[str, ...]
    is_task_candidate: bool


def extract_mentions(content: str) -> tuple[str, ...]:
    """Names following ``@``, in order of appearance, duplicates kept."""
    return tuple(MENTION_RE.findall(content))


def extract_document_refs(content: str) -> tuple[str, ...]:
    """Identifiers following ``#``, in order of appearance."""
    return tuple(DOCUMENT_REF_RE.findall(content))


def detect_task_trigger(content: str) -> bool:
    lowered = content.lower()
    return any(phrase in lowered for phrase in TASK_TRIGGER_PHRASES)


def annotate(content: str) -> Annotations:
    return Annotations(
        mentions=extract_mentions(content),
        document_refs=extract_document_refs(content),
        is_task_candidate=detect_task_trigger(content),
    )
