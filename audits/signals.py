import logging

from django.db.models.signals import pre_save
from django.dispatch import receiver

from .models import AuditTemplate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# A user has at most one default template
# ---------------------------------------------------------------------
@receiver(pre_save, sender=AuditTemplate)
def demote_previous_default(sender, instance, **kwargs):
    if not instance.is_default:
        return
    demoted = (
        AuditTemplate.objects.filter(created_by_id=instance.created_by_id, is_default=True)
        .exclude(pk=instance.pk)
        .update(is_default=False)
    )
    if demoted:
        logger.info("Demoted %d previous default template(s) for user id=%s", demoted, instance.created_by_id)
