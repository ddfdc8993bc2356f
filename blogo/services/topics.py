import re
from typing import Dict, Iterable, List, Optional

from blogo.schemas.blog import TagInfo, TopicGroup

FALLBACK_TOPIC = "Web Development"

# Declaration order is the display order of topic groups.
TOPICS: Dict[str, List[str]] = {
    "Languages & Runtimes": ["TypeScript", "Typescript", "Deno", "Gleam", "Python"],
    "Web Development": [
        "WebDev",
        "HTMX",
        "Frontend",
        "SSR",
        "Signals",
        "HATEOAS",
        "HAL",
        "design",
        "test",
    ],
    "Architecture & Design": ["Architecture", "Patterns", "Legacy"],
    "Functional & Concurrency": ["Functional", "Concurrency", "Effection", "Parsing"],
    "Product & Teams": [
        "Product",
        "Agile",
        "Teams",
        "Hiring",
        "Organization",
        "Leadership",
        "Culture",
        "Incentives",
        "Compensation",
        "Equity",
        "Finance",
        "Workplace",
    ],
    "Enterprise & Legacy": ["Enterprise"],
    "Identity & Privacy": ["VCs", "DIDs", "ZKPs"],
    "Music & Culture": ["music", "yugoslavia", "punk", "new-wave"],
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _normalize(tag: str) -> str:
    return tag.strip().lower()


def _build_index() -> Dict[str, List[str]]:
    index: Dict[str, List[str]] = {}
    for topic, tags in TOPICS.items():
        for tag in tags:
            topics = index.setdefault(_normalize(tag), [])
            if topic not in topics:
                topics.append(topic)
    return index


_TAG_TO_TOPICS = _build_index()


def topics_for_tag(tag: str) -> List[str]:
    return list(_TAG_TO_TOPICS.get(_normalize(tag), []))


def derive_topics_from_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Topics covered by the given tags, first-seen order, no fallback."""
    found: List[str] = []
    for tag in tags or []:
        for topic in topics_for_tag(tag):
            if topic not in found:
                found.append(topic)
    return found


def topic_to_slug(topic: str) -> str:
    return _NON_ALNUM.sub("-", topic.lower().replace("&", "")).strip("-")


def slug_to_topic(slug: str) -> Optional[str]:
    return next((topic for topic in TOPICS if topic_to_slug(topic) == slug), None)


def group_tags_by_topic(tags: Iterable[TagInfo]) -> List[TopicGroup]:
    buckets: Dict[str, List[TagInfo]] = {}
    for tag in tags:
        for topic in topics_for_tag(tag.name) or [FALLBACK_TOPIC]:
            bucket = buckets.setdefault(topic, [])
            if all(existing.name != tag.name for existing in bucket):
                bucket.append(tag)

    return [
        TopicGroup(
            topic=topic,
            slug=topic_to_slug(topic),
            tags=sorted(buckets[topic], key=lambda t: -t.count),
        )
        for topic in TOPICS
        if topic in buckets
    ]
