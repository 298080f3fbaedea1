import uuid

from django.db import models

from allocation.utils import utcnow


class SoftDeleteQuerySet(models.QuerySet):
    def soft_delete(self) -> int:
        return self.update(deleted_at=utcnow())


class LiveManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager: hides tombstoned rows."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class TrackedModel(models.Model):
    """
    Common columns for every allocation table.

    Rows are never physically deleted; soft_delete() sets a tombstone so the
    history stays available to the exclusivity-window checks. `objects` excludes
    tombstoned rows; `all_objects` sees everything.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = LiveManager()
    all_objects = models.Manager.from_queryset(SoftDeleteQuerySet)()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self):
        self.deleted_at = utcnow()
        self.save(update_fields=["deleted_at", "updated_at"])
