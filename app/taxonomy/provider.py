from __future__ import annotations

from typing import Protocol


class TaxonomyProvider(Protocol):
    @property
    def skills(self) -> tuple[str, ...]:
        """Tracked skill names in catalog order."""

    def claimed_skills(self, text: str) -> list[str]:
        """Return catalog skills mentioned in free text, in catalog order."""
