"""
Notification Rule Models

NotificationRule: a user's declared intent to be reminded about an entity.
OffsetPreset: a named "N minutes before" choice selectable by rules.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID, uuid4


@dataclass
class OffsetPreset:
    """Reusable offset choice, e.g. key='1h', minutes=60, label='1 hour'"""
    key: str = ""
    minutes: int = 0
    label: str = ""


@dataclass
class RuleOffset:
    """A resolved offset before due time"""
    minutes: int
    label: str


@dataclass
class NotificationRule:
    """
    Reminder rule owned by a source application.

    A rule either embeds its due time (due_at + entity_title) or leaves it
    to the entity resolver registered for its app. Offsets come from a single
    fixed offset_minutes, or from selected_offsets (preset keys) when the
    user picked several.
    """
    id: UUID = field(default_factory=uuid4)
    user_id: UUID = field(default_factory=uuid4)
    app: str = ""                                       # 'tasks', 'habits', ...
    entity_id: str = ""
    entity_title: str = ""
    due_at: Optional[datetime] = None
    offset_minutes: Optional[int] = None
    offset_label: Optional[str] = None
    selected_offsets: Optional[List[str]] = None        # preset keys
    channel: str = "telegram"
    enabled: bool = True

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_selected_offsets(self) -> bool:
        return self.selected_offsets is not None

    def resolve_offsets(self, presets: Dict[str, OffsetPreset]) -> List[RuleOffset]:
        """
        Expand the rule's offsets to (minutes, label) pairs.

        Unknown preset keys are dropped. Duplicate minutes collapse into one
        offset since they map to the same fire time.
        """
        offsets: List[RuleOffset] = []
        if self.has_selected_offsets:
            for key in self.selected_offsets:
                preset = presets.get(key)
                if preset:
                    offsets.append(RuleOffset(preset.minutes, preset.label or key))
        elif self.offset_minutes is not None:
            label = self.offset_label or f"{self.offset_minutes} min"
            offsets.append(RuleOffset(self.offset_minutes, label))

        seen = set()
        unique = []
        for offset in offsets:
            if offset.minutes not in seen:
                seen.add(offset.minutes)
                unique.append(offset)
        return unique
