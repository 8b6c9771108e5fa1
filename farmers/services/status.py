"""
Farmer lifecycle status derivation.

Enrolled -> FarmCaptured happens automatically once a farm is captured.
Validated and Verified are manual statuses and always win.
"""

import logging

from django.utils import timezone

logger = logging.getLogger(__name__)

ENROLLED = 'Enrolled'
FARM_CAPTURED = 'FarmCaptured'
VALIDATED = 'Validated'
VERIFIED = 'Verified'

MANUAL_STATUSES = frozenset({VALIDATED, VERIFIED})


def derive_farmer_status(current_status, farm_count):
    """
    Return the status a farmer should have given their farm count.

    Raises:
        ValueError: if farm_count is negative
    """
    if farm_count < 0:
        raise ValueError(f"farm_count must not be negative, got {farm_count}")

    if current_status in MANUAL_STATUSES:
        return current_status

    return FARM_CAPTURED if farm_count > 0 else ENROLLED


def update_farmer_status_by_farms(farmer):
    """
    Re-derive and persist ``farmer.status`` from their current farm count.

    Only writes when the status actually changes.

    Returns:
        str: the (possibly unchanged) status
    """
    new_status = derive_farmer_status(farmer.status, farmer.farms.count())

    if new_status != farmer.status:
        old_status = farmer.status
        farmer.status = new_status
        farmer.updated_at = timezone.now()
        farmer.save(update_fields=['status', 'updated_at'])
        logger.info(f"Farmer status updated: {farmer.pk} from {old_status} to {new_status}")

    return new_status
