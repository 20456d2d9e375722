"""Plain data shapes passed between the matching stages."""

from dataclasses import dataclass, field
from typing import Any

TAG_SLOTS = ("title", "company", "looking_for", "offering")


@dataclass
class TagSet:
    """Four normalized phrase lists describing a profile."""

    title: list[str] = field(default_factory=list)
    company: list[str] = field(default_factory=list)
    looking_for: list[str] = field(default_factory=list)
    offering: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {slot: list(getattr(self, slot)) for slot in TAG_SLOTS}


@dataclass
class ProfileVectors:
    """Resolved embeddings for one profile. An empty list means "no tags for that side"."""

    offering_vec: list[float] = field(default_factory=list)
    looking_vec: list[float] = field(default_factory=list)


@dataclass
class ProfileRecord:
    """A profile as read from the store.

    Vectors are empty lists when they have never been computed; repositories
    must never hand None to the engine.
    """

    id: str | None
    name: str | None = None
    headline: str | None = None
    tags: TagSet = field(default_factory=TagSet)
    offering_vec: list[float] = field(default_factory=list)
    looking_vec: list[float] = field(default_factory=list)


@dataclass
class MatchCandidate:
    """One scored candidate for a single query. Discarded after the response is built."""

    id: str | None
    name: str | None
    headline: str | None
    score: float
    # Mean of the candidate's two embeddings; only used for MMR diversity
    similarity_handle: list[float] = field(default_factory=list, repr=False)
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "headline": self.headline,
            "score": self.score,
            "reasons": list(self.reasons),
        }
