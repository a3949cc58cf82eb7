"""Keyword-pattern suggestions offered when no source matches a question."""

from __future__ import annotations

import re

_KEY_TERMS_RE = re.compile(r"\b(police|cop|officer|id|identification|rights|law|legal|arrest|stop|detain)\b")

# (subject pattern, [(action pattern, phrase), ...])
_ALTERNATIVES = [
    (
        re.compile(r"police|cop|officer"),
        [
            (re.compile(r"id|identification"), "regarding identification requests"),
            (re.compile(r"rights"), "about citizen interactions"),
            (re.compile(r"arrest|stop|detain"), "about detaining individuals"),
        ],
    ),
]

_SITUATIONS = [
    (re.compile(r"\b(id|identification)\b"), "traffic stop, routine patrol, or at a public event"),
    (re.compile(r"\b(rights|legal)\b"), "specific circumstance or location"),
    (re.compile(r"\b(arrest|stop|detain)\b"), "traffic violation, suspicious activity, or emergency situation"),
]

_TOPICS = [
    (
        re.compile(r"\b(id|identification)\b"),
        "Consider asking about specific police procedures or citizen rights during identification checks.",
    ),
    (re.compile(r"\b(rights|legal)\b"), "Try asking about your specific rights in this situation."),
    (
        re.compile(r"\b(arrest|stop|detain)\b"),
        "You might want to ask about the legal requirements for police stops or detentions.",
    ),
]

DEFAULT_ALTERNATIVE = "Could you rephrase your question to be more specific about what you want to know?"
DEFAULT_SITUATION = "Specify the particular situation you're asking about."
DEFAULT_TOPIC = "Try focusing your question on specific legal rights or procedures."


def alternative_question(question: str) -> str:
    """Suggest a rephrased question built from recognised key terms."""
    terms = _KEY_TERMS_RE.findall(question.lower())
    for subject, actions in _ALTERNATIVES:
        if not any(subject.search(t) for t in terms):
            continue
        for action, phrase in actions:
            if any(action.search(t) for t in terms):
                return f"What are the rules for police officers {phrase} in my state?"
    return DEFAULT_ALTERNATIVE


def situational_suggestion(question: str) -> str:
    lowered = question.lower()
    for pattern, situation in _SITUATIONS:
        if pattern.search(lowered):
            return f"Specify if you're asking about a particular situation, like during a {situation}."
    return DEFAULT_SITUATION


def topic_suggestion(question: str) -> str:
    lowered = question.lower()
    for pattern, suggestion in _TOPICS:
        if pattern.search(lowered):
            return suggestion
    return DEFAULT_TOPIC


def build_suggestions(question: str) -> list[str]:
    """Exactly three suggestions: rephrasing, situation, topic."""
    return [
        alternative_question(question),
        situational_suggestion(question),
        topic_suggestion(question),
    ]
