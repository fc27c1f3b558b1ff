"""Name normalization: singular/plural forms and case conversion.

Every adapter routes raw names (JSON keys, schema names, URL segments, table
names) through these functions so the same semantic entity always lands on
the same canonical name.
"""

import re
from types import MappingProxyType
from typing import NamedTuple

# plural -> singular
IRREGULAR_SINGULARS = MappingProxyType(
    {
        "people": "person",
        "men": "man",
        "women": "woman",
        "children": "child",
        "mice": "mouse",
        "geese": "goose",
        "teeth": "tooth",
        "feet": "foot",
        "data": "datum",
        "media": "medium",
        "analyses": "analysis",
        "criteria": "criterion",
    }
)

# singular -> plural
IRREGULAR_PLURALS = MappingProxyType({singular: plural for plural, singular in IRREGULAR_SINGULARS.items()})

_VOWELS = frozenset("aeiou")
_SEPARATORS = re.compile(r"[_\-\s]+")


class NameForms(NamedTuple):
    """All derived spellings of a single word."""

    singular: str
    plural: str
    snake_case: str
    pascal_case: str
    camel_case: str


class EntityNames(NamedTuple):
    """Canonical identifiers for one entity."""

    name: str  # singular PascalCase
    table: str  # plural snake_case
    singular: str  # singular snake_case


def singularize(word: str) -> str:
    """Singularize a word using the irregular table, then suffix rules.

    Only the last snake_case segment is matched against the irregular table,
    so ``blog_people`` becomes ``blog_person``.
    """
    word = word.lower()
    head, sep, last = word.rpartition("_")

    if last in IRREGULAR_SINGULARS:
        return head + sep + IRREGULAR_SINGULARS[last]
    if last in IRREGULAR_PLURALS:
        return word

    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("sses", "shes", "ches", "xes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def pluralize(word: str) -> str:
    """Pluralize a word using the irregular table, then suffix rules."""
    word = word.lower()
    head, sep, last = word.rpartition("_")

    if last in IRREGULAR_PLURALS:
        return head + sep + IRREGULAR_PLURALS[last]
    if last in IRREGULAR_SINGULARS:
        return word

    if len(word) > 1 and word.endswith("y") and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if word.endswith(("s", "sh", "ch", "x")):
        return word + "es"
    return word + "s"


def to_snake_case(value: str) -> str:
    """Convert ``blogPost`` / ``BlogPost`` / ``blog-post`` to ``blog_post``.

    Runs of capitals stay together, so ``userID`` becomes ``user_id``.
    """
    value = re.sub(r"[\s\-]+", "_", value.strip())
    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    value = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", value)
    return re.sub(r"_+", "_", value).lower()


def to_pascal_case(value: str) -> str:
    """Convert ``blog_post`` / ``blog-post`` / ``blog post`` to ``BlogPost``."""
    return "".join(word[:1].upper() + word[1:] for word in _SEPARATORS.split(value) if word)


def to_camel_case(value: str) -> str:
    """Convert ``blog_post`` to ``blogPost``."""
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def normalize(word: str) -> NameForms:
    """Derive every spelling of ``word`` in one call."""
    singular = singularize(to_snake_case(word))
    return NameForms(
        singular=singular,
        plural=pluralize(singular),
        snake_case=to_snake_case(word),
        pascal_case=to_pascal_case(word),
        camel_case=to_camel_case(word),
    )


def entity_names(raw: str) -> EntityNames:
    """Canonical entity name, table and singular key for a raw source name.

    >>> entity_names("blogPosts")
    EntityNames(name='BlogPost', table='blog_posts', singular='blog_post')
    """
    singular = singularize(to_snake_case(raw))
    return EntityNames(name=to_pascal_case(singular), table=pluralize(singular), singular=singular)


def foreign_key_for(reference: str | None) -> str:
    """Foreign key column referencing ``reference``; ``parent_id`` without one."""
    if not reference:
        return "parent_id"
    return singularize(to_snake_case(reference)) + "_id"
