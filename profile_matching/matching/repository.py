"""Interfaces the engine depends on. Implementations live in profile_matching.resources."""

from collections.abc import Sequence
from typing import Protocol

from profile_matching.matching.types import ProfileRecord, TagSet


class ProfileNotFoundError(LookupError):
    """Raised when a profile id does not exist in the store."""

    def __init__(self, profile_id: str):
        super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id


class ProfileRepository(Protocol):
    def get_profile(self, profile_id: str) -> ProfileRecord | None: ...

    def list_other_profiles(self, exclude_id: str) -> list[ProfileRecord]: ...

    def update_tags(self, profile_id: str, tags: TagSet) -> None: ...

    def update_vectors(
        self,
        profile_id: str,
        offering_vec: Sequence[float],
        looking_vec: Sequence[float],
    ) -> None: ...


class EmbeddingProvider(Protocol):
    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...
