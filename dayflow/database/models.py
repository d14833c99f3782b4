"""
Database models for Dayflow.

The store is used as a plain document store: one row per
(user_id, path) with a JSON body. Known paths:
- gamification/stats: the user's progression aggregate
- days/{YYYY-MM-DD}: per-day annotations (weekly pass flag)
"""

from tortoise import fields, models


class Document(models.Model):
    """A JSON document addressed by user and path."""

    id = fields.IntField(primary_key=True)
    user_id = fields.CharField(max_length=128, db_index=True)
    path = fields.CharField(max_length=255)

    data: dict = fields.JSONField(default=dict)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "documents"
        unique_together = (("user_id", "path"),)

    def __str__(self) -> str:
        return f"{self.user_id}/{self.path}"
