"""Shared fakes for the matching tests: an in-memory profile store and a scripted embedder."""

from collections.abc import Sequence

import pytest

from profile_matching.matching.types import ProfileRecord, TagSet
from profile_matching.matching.vectors import EMBED_DIM, hash_embed_one


def unit(index: int) -> list[float]:
    """Basis vector e_index of EMBED_DIM dimensions."""
    vector = [0.0] * EMBED_DIM
    vector[index] = 1.0
    return vector


class FakeRepository:
    """In-memory ProfileRepository that records writes."""

    def __init__(self, profiles: Sequence[ProfileRecord] = ()):
        self.profiles = {p.id: p for p in profiles}
        self.vector_updates: list[tuple[str, list[float], list[float]]] = []
        self.tag_updates: list[tuple[str, TagSet]] = []
        self.fail_writes = False

    def get_profile(self, profile_id):
        return self.profiles.get(profile_id)

    def list_other_profiles(self, exclude_id):
        return [p for pid, p in self.profiles.items() if pid != exclude_id]

    def list_profiles(self):
        return list(self.profiles.values())

    def update_tags(self, profile_id, tags):
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.tag_updates.append((profile_id, tags))
        self.profiles[profile_id].tags = tags

    def update_vectors(self, profile_id, offering_vec, looking_vec):
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.vector_updates.append((profile_id, list(offering_vec), list(looking_vec)))
        profile = self.profiles.get(profile_id)
        if profile is not None:
            profile.offering_vec = list(offering_vec)
            profile.looking_vec = list(looking_vec)


class FakeEmbedder:
    """EmbeddingProvider that returns scripted vectors and records every batch."""

    def __init__(self, vectors: dict[str, list[float]] | None = None):
        self.vectors = vectors or {}
        self.calls: list[list[str]] = []

    async def embed_batch(self, texts):
        items = [t.strip() for t in texts if t and t.strip()]
        self.calls.append(items)
        return [self.vectors.get(t) or hash_embed_one(t) for t in items]


def make_profile(
    profile_id: str | None,
    title=(),
    company=(),
    looking_for=(),
    offering=(),
    offering_vec=(),
    looking_vec=(),
    name: str | None = None,
) -> ProfileRecord:
    return ProfileRecord(
        id=profile_id,
        name=name or (f"Person {profile_id}" if profile_id else None),
        headline=None,
        tags=TagSet(
            title=list(title),
            company=list(company),
            looking_for=list(looking_for),
            offering=list(offering),
        ),
        offering_vec=list(offering_vec),
        looking_vec=list(looking_vec),
    )


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()
