"""Peewee ORM models for the event log database."""

from __future__ import annotations

import datetime as _dt
from typing import Any

import peewee
from playhouse.sqlite_ext import JSONField

from linkding_companion.core.time_utils import utc_now

# A proxy that will be initialised with the concrete database instance at runtime.
database_proxy: peewee.Database = peewee.DatabaseProxy()


class UTCDateTimeField(peewee.DateTimeField):
    """Stores naive UTC in SQLite and hands back timezone-aware values.

    A fixed-width format keeps the column lexically sortable, which range
    filters on ``created_at`` rely on.
    """

    def db_value(self, value: Any) -> Any:
        if isinstance(value, _dt.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(_dt.UTC).replace(tzinfo=None)
            return value.strftime("%Y-%m-%d %H:%M:%S.%f")
        return super().db_value(value)

    def python_value(self, value: Any) -> Any:
        value = super().python_value(value)
        if isinstance(value, _dt.datetime) and value.tzinfo is None:
            return value.replace(tzinfo=_dt.UTC)
        return value


class BaseModel(peewee.Model):
    """Base Peewee model bound to the lazily initialised database proxy."""

    def save(self, *args: Any, **kwargs: Any) -> int:
        if hasattr(self, "updated_at"):
            self.updated_at = utc_now()
        return super().save(*args, **kwargs)

    class Meta:
        database = database_proxy
        legacy_table_names = False


class Event(BaseModel):
    """Append-only record that an enrichment action happened for a bookmark.

    ``bookmark_id`` is a plain reference into linkding, not a foreign key.
    """

    id = peewee.AutoField()
    bookmark_id = peewee.BigIntegerField()
    action = peewee.TextField()
    occurred_at = UTCDateTimeField()
    extra = JSONField(default=dict)
    created_at = UTCDateTimeField(default=utc_now)
    updated_at = UTCDateTimeField(default=utc_now)

    class Meta:
        table_name = "events"
        indexes = (
            (("bookmark_id", "action"), False),
            (("action", "created_at"), False),
        )


ALL_MODELS: tuple[type[BaseModel], ...] = (Event,)
