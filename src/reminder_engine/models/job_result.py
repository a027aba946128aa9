"""
Job Result Models

Summary counters returned by the filler and dispatcher runs.
"""
from dataclasses import dataclass, asdict


@dataclass
class FillResult:
    """Outcome of one filler pass"""
    total: int = 0          # rules considered
    inserted: int = 0
    skipped: int = 0        # outside horizon or unresolved entity
    duplicates: int = 0     # already queued (rule_id, fire_at)
    deleted: int = 0        # stale pending entries removed
    errors: int = 0

    def to_dict(self) -> dict:
        return {"ok": True, **asdict(self)}


@dataclass
class DispatchResult:
    """Outcome of one dispatcher run"""
    total: int = 0          # items selected in phases 1 and 2
    woken: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0        # changed by someone else since selection
    errors: int = 0
    digest_users: int = 0
    digest_items: int = 0

    def to_dict(self) -> dict:
        return {"ok": True, **asdict(self)}
