from blogo.schemas.blog import TagInfo
from blogo.services.topics import (
    FALLBACK_TOPIC,
    TOPICS,
    derive_topics_from_tags,
    group_tags_by_topic,
    slug_to_topic,
    topic_to_slug,
)


def test_there_are_eight_topics():
    assert len(TOPICS) == 8
    assert FALLBACK_TOPIC in TOPICS


def test_topic_to_slug_drops_ampersand():
    assert topic_to_slug("Languages & Runtimes") == "languages-runtimes"
    assert topic_to_slug("Web Development") == "web-development"


def test_slug_to_topic_round_trips_and_rejects_unknown():
    for topic in TOPICS:
        assert slug_to_topic(topic_to_slug(topic)) == topic
    assert slug_to_topic("cooking") is None


def test_derive_topics_is_case_insensitive_and_unique():
    topics = derive_topics_from_tags(["typescript", "Deno", "Architecture", "unknown"])

    assert topics == ["Languages & Runtimes", "Architecture & Design"]
    assert derive_topics_from_tags(None) == []


def test_group_tags_uses_declared_order_and_fallback():
    tags = [
        TagInfo(name="Cooking", count=1),
        TagInfo(name="Patterns", count=2),
        TagInfo(name="Deno", count=1),
        TagInfo(name="TypeScript", count=4),
    ]

    groups = group_tags_by_topic(tags)

    assert [g.topic for g in groups] == ["Languages & Runtimes", "Web Development", "Architecture & Design"]
    assert [t.name for t in groups[0].tags] == ["TypeScript", "Deno"]
    assert [t.name for t in groups[1].tags] == ["Cooking"]
    assert groups[2].slug == "architecture-design"


def test_group_tags_counts_a_tag_once_per_topic():
    groups = group_tags_by_topic([TagInfo(name="typescript", count=1)])

    assert len(groups) == 1
    assert [t.name for t in groups[0].tags] == ["typescript"]
