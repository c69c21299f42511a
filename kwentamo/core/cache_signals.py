"""
Cache invalidation signals
Any change to the records feeding the dashboard drops that owner's cached summary.
"""
import logging

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .cache_utils import invalidate_dashboard_cache

logger = logging.getLogger(__name__)

DASHBOARD_SOURCES = (
    'sales.Sale',
    'expenses.Expense',
    'catalog.Ingredient',
    'purchasing.Purchase',
)


def _invalidate_owner_dashboard(sender, instance, **kwargs):
    invalidate_dashboard_cache(getattr(instance, 'user_id', None))


for _sender in DASHBOARD_SOURCES:
    post_save.connect(_invalidate_owner_dashboard, sender=_sender,
                      dispatch_uid=f'dashboard_cache_save_{_sender}')
    post_delete.connect(_invalidate_owner_dashboard, sender=_sender,
                        dispatch_uid=f'dashboard_cache_delete_{_sender}')


@receiver(post_save, sender='core.User', dispatch_uid='dashboard_cache_user_save')
def invalidate_on_user_change(sender, instance, created, **kwargs):
    # Deactivated users must not be served a stale summary
    if not created and not instance.is_active:
        invalidate_dashboard_cache(instance.pk)
