"""Vault analysis - read-only statistics over stored entries.

Passphrases are grouped by SHA-256 digest; no report carries a plaintext
passphrase.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from .config import Config
from .constants import resolve
from .models import ConstantPair, CredentialEntry, utc_now
from .strength import calculate


@dataclass(frozen=True)
class EntrySummary:
    """Minimum details of an entry used in reports."""

    id: str
    platform: str
    url: str
    total_accesses: int

    @classmethod
    def from_entry(cls, entry: CredentialEntry) -> "EntrySummary":
        return cls(entry.id, entry.platform, entry.url, entry.total_accesses)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "platform": self.platform,
            "url": self.url,
            "totalAccesses": self.total_accesses,
        }


@dataclass
class VaultStatistics:
    """Dashboard figures of a vault."""

    total_count: int = 0
    average_length: float = 0.0
    unique_platforms: List[str] = field(default_factory=list)
    unique_passphrases: int = 0
    most_accessed: List[EntrySummary] = field(default_factory=list)
    common_by_platform: List[List[EntrySummary]] = field(default_factory=list)
    percentage_of_common: float = 0.0
    strengths: Dict[str, int] = field(default_factory=dict)
    average_strength: float = -2.0
    weak: List[EntrySummary] = field(default_factory=list)
    medium: List[EntrySummary] = field(default_factory=list)
    strong: List[EntrySummary] = field(default_factory=list)

    @property
    def unique_platforms_count(self) -> int:
        return len(self.unique_platforms)

    def to_dict(self) -> dict:
        return {
            "totalCount": self.total_count,
            "averageLength": self.average_length,
            "uniquePlatforms": self.unique_platforms,
            "uniquePlatformsCount": self.unique_platforms_count,
            "uniquePassphrases": self.unique_passphrases,
            "mostAccessed": [s.to_dict() for s in self.most_accessed],
            "commonByPlatform": [
                [s.to_dict() for s in group] for group in self.common_by_platform
            ],
            "percentageOfCommon": self.percentage_of_common,
            "strengths": self.strengths,
            "averageStrength": self.average_strength,
            "weakPassphrases": [s.to_dict() for s in self.weak],
            "mediumPassphrases": [s.to_dict() for s in self.medium],
            "strongPassphrases": [s.to_dict() for s in self.strong],
        }


def passphrase_digest(passphrase: str) -> str:
    """SHA-256 hex digest used as a grouping key instead of the plaintext."""
    return hashlib.sha256(passphrase.encode("utf-8")).hexdigest()


def find_common_passphrases(
    entries: Iterable[CredentialEntry],
) -> List[List[CredentialEntry]]:
    """Groups of entries sharing the same current passphrase, by platform."""
    groups: Dict[str, List[CredentialEntry]] = {}
    for entry in entries:
        groups.setdefault(passphrase_digest(entry.passphrase), []).append(entry)

    return [
        sorted(group, key=lambda e: e.platform)
        for group in groups.values()
        if len(group) > 1
    ]


def levenshtein(source: str, target: str) -> int:
    """Edit distance between two strings."""
    previous = list(range(len(target) + 1))
    for i, source_char in enumerate(source, 1):
        current = [i]
        for j, target_char in enumerate(target, 1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (source_char != target_char),
                )
            )
        previous = current
    return previous[-1]


def find_similar_to_identity(
    entries: Iterable[CredentialEntry],
    constants: Sequence[ConstantPair] = (),
    threshold: int = Config.SIMILARITY_THRESHOLD,
) -> List[CredentialEntry]:
    """Entries whose passphrase is within ``threshold`` edits of the identity."""
    return [
        entry
        for entry in entries
        if levenshtein(
            resolve(entry.identity, constants).lower(), entry.passphrase.lower()
        )
        <= threshold
    ]


def find_old_passphrases(
    entries: Iterable[CredentialEntry],
    now: Optional[datetime] = None,
    max_age_days: int = Config.OLD_PASSPHRASE_DAYS,
) -> List[CredentialEntry]:
    """Entries whose current passphrase was set more than ``max_age_days`` ago."""
    cutoff = (now or utc_now()) - timedelta(days=max_age_days)
    return [entry for entry in entries if entry.passphrase_updated_at < cutoff]


def find_weak_passphrases(
    entries: Iterable[CredentialEntry], below: int = Config.WEAK_SCORE_BELOW
) -> List[CredentialEntry]:
    """Entries whose current passphrase scores under ``below``."""
    return [entry for entry in entries if calculate(entry.passphrase) < below]


def get_vault_statistics(entries: Sequence[CredentialEntry]) -> VaultStatistics:
    """
    Compute dashboard statistics.

    Returns:
        VaultStatistics with counts, access ranking, shared-passphrase groups
        and strength buckets (weak < 4, medium 4-5, strong > 5).
    """
    if not entries:
        return VaultStatistics()

    total = len(entries)
    strengths = {entry.id: calculate(entry.passphrase) for entry in entries}
    common = find_common_passphrases(entries)
    in_common = {entry.id for group in common for entry in group}

    most_accessed = sorted(entries, key=lambda e: e.total_accesses, reverse=True)

    return VaultStatistics(
        total_count=total,
        average_length=sum(len(e.passphrase) for e in entries) / total,
        unique_platforms=list(dict.fromkeys(e.platform for e in entries)),
        unique_passphrases=len({passphrase_digest(e.passphrase) for e in entries}),
        most_accessed=[
            EntrySummary.from_entry(e)
            for e in most_accessed[: Config.MOST_ACCESSED_LIMIT]
        ],
        common_by_platform=[
            [EntrySummary.from_entry(e) for e in group] for group in common
        ],
        percentage_of_common=len(in_common) / total * 100,
        strengths=strengths,
        average_strength=sum(strengths.values()) / total,
        weak=[EntrySummary.from_entry(e) for e in find_weak_passphrases(entries)],
        medium=[
            EntrySummary.from_entry(e)
            for e in entries
            if Config.WEAK_SCORE_BELOW <= strengths[e.id] <= Config.STRONG_SCORE_ABOVE
        ],
        strong=[
            EntrySummary.from_entry(e)
            for e in entries
            if strengths[e.id] > Config.STRONG_SCORE_ABOVE
        ],
    )
