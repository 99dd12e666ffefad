"""Manual review queue for changes the classifier could not settle."""

from pydantic import Field

from .models import Character, ChangeType, DescriptionChange, StoredModel, utc_now


class ReviewItem(StoredModel):
    """One thing a human should look at."""

    character_name: str
    patch_id: int
    patch_version: str
    reason: str = Field(description="'unknown_category' or 'mixed_direction'")
    target: str | None = None
    text: str | None = None
    overall_change: ChangeType


class ReviewQueue(StoredModel):
    generated_at: str = Field(default_factory=utc_now)
    total_items: int = 0
    items: list[ReviewItem] = Field(default_factory=list)


def collect_review_items(characters: list[Character]) -> ReviewQueue:
    """List unknown-category changes and mixed-direction patches.

    Returns:
        Queue ordered by character name, then newest patch first
    """
    items: list[ReviewItem] = []
    for character in sorted(characters, key=lambda c: c.name):
        for entry in character.patch_history:
            for change in entry.changes:
                if isinstance(change, DescriptionChange) and change.change_category == "unknown":
                    items.append(
                        ReviewItem(
                            character_name=character.name,
                            patch_id=entry.patch_id,
                            patch_version=entry.patch_version,
                            reason="unknown_category",
                            target=change.target,
                            text=change.description,
                            overall_change=entry.overall_change,
                        )
                    )
            if entry.overall_change == "mixed":
                items.append(
                    ReviewItem(
                        character_name=character.name,
                        patch_id=entry.patch_id,
                        patch_version=entry.patch_version,
                        reason="mixed_direction",
                        text=entry.dev_comment,
                        overall_change=entry.overall_change,
                    )
                )
    return ReviewQueue(total_items=len(items), items=items)
