"""
Farm Signals

Capturing or removing a farm re-derives the owner's lifecycle status
(Enrolled <-> FarmCaptured; manual statuses are left alone).
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender='farms.Farm')
def update_status_on_farm_capture(sender, instance, created, **kwargs):
    if not created:
        return

    from farmers.services.status import update_farmer_status_by_farms

    update_farmer_status_by_farms(instance.farmer)


@receiver(post_delete, sender='farms.Farm')
def update_status_on_farm_removal(sender, instance, **kwargs):
    from farmers.models import Farmer
    from farmers.services.status import update_farmer_status_by_farms

    # The farmer itself may be going away (cascade delete)
    farmer = Farmer.objects.filter(pk=instance.farmer_id).first()
    if farmer is None:
        logger.debug(f"Farm {instance.pk} removed together with its farmer")
        return

    update_farmer_status_by_farms(farmer)
