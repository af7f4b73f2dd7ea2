import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import ChecklistItem

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Keep item order contiguous after a single item is deleted
# ---------------------------------------------------------------------
@receiver(post_delete, sender=ChecklistItem)
def compact_order_after_delete(sender, instance, **kwargs):
    """
    Shift the remaining items down so order_index stays 0..n-1.
    Rows are walked in ascending order, so each target slot is already free.
    """
    remaining = ChecklistItem.objects.filter(checklist_id=instance.checklist_id).order_by('order_index')
    moved = 0
    for index, item in enumerate(remaining):
        if item.order_index != index:
            ChecklistItem.objects.filter(pk=item.pk).update(order_index=index)
            moved += 1
    if moved:
        logger.debug("Compacted %d item(s) on checklist id=%s after delete", moved, instance.checklist_id)
