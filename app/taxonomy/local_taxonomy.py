from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from .provider import TaxonomyProvider


class LocalTaxonomy(TaxonomyProvider):
    def __init__(self, catalog_path: str | Path | None = None) -> None:
        path = Path(catalog_path) if catalog_path else Path(__file__).with_name("skills.json")
        self._skills, self._patterns = self._load_catalog(path)

    @staticmethod
    def _load_catalog(path: Path) -> tuple[tuple[str, ...], Mapping[str, tuple[str, ...]]]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)

        skills: list[str] = []
        for name in raw.get("skills", []):
            clean = str(name).strip()
            if clean and clean not in skills:
                skills.append(clean)

        synonyms = raw.get("synonyms", {})
        patterns: dict[str, tuple[str, ...]] = {}
        for skill in skills:
            variants = [skill, *synonyms.get(skill, [])]
            lowered: list[str] = []
            for variant in variants:
                value = str(variant).strip().lower()
                if value and value not in lowered:
                    lowered.append(value)
            patterns[skill] = tuple(lowered)
        return tuple(skills), MappingProxyType(patterns)

    @property
    def skills(self) -> tuple[str, ...]:
        return self._skills

    def claimed_skills(self, text: str) -> list[str]:
        # Plain substring match: "java" also hits inside "javascript".
        normalized = (text or "").lower()
        if not normalized.strip():
            return []
        return [
            skill
            for skill in self._skills
            if any(pattern in normalized for pattern in self._patterns[skill])
        ]
