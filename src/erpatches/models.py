"""Data models for character balance history.

These Pydantic models define the schema for everything the pipeline persists.
Python attributes are snake_case; the stored JSON uses camelCase keys
(``patchId``, ``changeCategory``...) so records stay readable by the web front end.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator
from pydantic.alias_generators import to_camel

# Type aliases
ChangeType = Literal["buff", "nerf", "mixed"]
ChangeCategory = Literal["numeric", "mechanic", "added", "removed", "unknown"]
DescriptionCategory = Literal["mechanic", "added", "removed", "unknown"]
PatchStatus = Literal["success", "no_content", "error", "redirect"]

DEFAULT_TARGET = "기본 스탯"


def utc_now() -> str:
    """Current time as an ISO timestamp."""
    return datetime.now(tz=timezone.utc).isoformat()


class StoredModel(BaseModel):
    """Base for persisted records: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, ready for ``json.dumps``."""
        return self.model_dump(mode="json", by_alias=True)


class NumericChange(StoredModel):
    """A value change written as ``stat before → after``."""

    model_config = ConfigDict(extra="forbid")

    target: str = Field(description="Skill header or '기본 스탯' for base stats")
    stat: str = Field(description="Qualifier text naming the changed value")
    before: str = Field(description="Cleaned old value, may be composite like '10/40/70(+30%)'")
    after: str = Field(description="Cleaned new value")
    change_type: ChangeType = "mixed"
    change_category: Literal["numeric"] = "numeric"


class DescriptionChange(StoredModel):
    """A free-text change: reworks, added or removed effects."""

    model_config = ConfigDict(extra="forbid")

    target: str
    description: str
    change_type: ChangeType = "mixed"
    change_category: DescriptionCategory = "mechanic"


def _change_kind(value: object) -> str:
    """Route raw dicts (either key spelling) and model instances to a union member."""
    if isinstance(value, dict):
        category = value.get("changeCategory", value.get("change_category"))
    else:
        category = getattr(value, "change_category", None)
    return "numeric" if category == "numeric" else "description"


Change = Annotated[
    Union[
        Annotated[NumericChange, Tag("numeric")],
        Annotated[DescriptionChange, Tag("description")],
    ],
    Discriminator(_change_kind),
]


class PatchEntry(StoredModel):
    """One character's changes in one patch note."""

    patch_id: int = Field(description="Source document id, unique per patch note")
    patch_version: str = Field(description="Short version like '1.2a', or the raw title")
    patch_date: str = Field(description="ISO date YYYY-MM-DD")
    overall_change: ChangeType = "mixed"
    streak: int = Field(default=0, description="Running streak count at this entry")
    dev_comment: str | None = None
    changes: list[Change] = Field(default_factory=list)

    @field_validator("patch_date")
    @classmethod
    def date_must_be_day(cls, v: str) -> str:
        """Truncate timestamps to the ISO day."""
        return v.split("T")[0]


class CurrentStreak(StoredModel):
    """Direction and length of the run ending at the newest patch."""

    type: ChangeType | None = None
    count: int = 0


class CharacterStats(StoredModel):
    """Aggregates derived from a character's patch history."""

    total_patches: int = 0
    buff_count: int = 0
    nerf_count: int = 0
    mixed_count: int = 0
    current_streak: CurrentStreak = Field(default_factory=CurrentStreak)
    max_buff_streak: int = 0
    max_nerf_streak: int = 0


class Character(StoredModel):
    """A playable character and its full balance history (newest first)."""

    name: str
    name_en: str | None = None
    stats: CharacterStats = Field(default_factory=CharacterStats)
    patch_history: list[PatchEntry] = Field(default_factory=list)

    def find_patch(self, patch_id: int) -> PatchEntry | None:
        """Return the first history entry for ``patch_id``."""
        return next((p for p in self.patch_history if p.patch_id == patch_id), None)

    def has_patch(self, patch_id: int) -> bool:
        return self.find_patch(patch_id) is not None


class PatchNote(StoredModel):
    """Crawl and validation metadata for one published patch note."""

    id: int
    title: str
    link: str
    created_at: str
    updated_at: str | None = None
    thumbnail_url: str | None = None
    view_count: int = 0
    status: PatchStatus | None = None
    has_character_data: bool | None = None
    validated_at: str | None = None
    is_parsed: bool = False
    parsed_at: str | None = None

    @field_validator("link")
    @classmethod
    def link_must_be_url(cls, v: str) -> str:
        """Ensure link is an HTTP(S) URL."""
        if not v.startswith("http://") and not v.startswith("https://"):
            raise ValueError(f"Link must start with http:// or https://, got: {v}")
        return v
