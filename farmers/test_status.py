"""
Tests for farmer lifecycle status derivation.
"""
import pytest

from farmers.models import Farmer
from farmers.services.status import derive_farmer_status, update_farmer_status_by_farms


class TestDeriveFarmerStatus:

    @pytest.mark.parametrize('current,farm_count,expected', [
        ('Enrolled', 0, 'Enrolled'),
        ('Enrolled', 1, 'FarmCaptured'),
        ('FarmCaptured', 3, 'FarmCaptured'),
        ('FarmCaptured', 0, 'Enrolled'),
        ('Validated', 0, 'Validated'),
        ('Validated', 2, 'Validated'),
        ('Verified', 0, 'Verified'),
        ('Verified', 5, 'Verified'),
        ('', 1, 'FarmCaptured'),
        (None, 0, 'Enrolled'),
    ])
    def test_derivation(self, current, farm_count, expected):
        assert derive_farmer_status(current, farm_count) == expected

    def test_negative_farm_count_rejected(self):
        with pytest.raises(ValueError):
            derive_farmer_status('Enrolled', -1)


@pytest.mark.django_db
class TestFarmSignals:

    def test_capturing_first_farm_moves_to_farm_captured(self, make_farmer, make_farm):
        farmer = make_farmer()
        assert farmer.status == Farmer.Status.ENROLLED

        make_farm(farmer)

        farmer.refresh_from_db()
        assert farmer.status == Farmer.Status.FARM_CAPTURED

    def test_removing_last_farm_moves_back_to_enrolled(self, make_farmer, make_farm):
        farmer = make_farmer()
        first = make_farm(farmer)
        second = make_farm(farmer)

        first.delete()
        farmer.refresh_from_db()
        assert farmer.status == Farmer.Status.FARM_CAPTURED

        second.delete()
        farmer.refresh_from_db()
        assert farmer.status == Farmer.Status.ENROLLED

    def test_manual_status_survives_farm_changes(self, make_farmer, make_farm):
        farmer = make_farmer(status=Farmer.Status.VERIFIED)
        farm = make_farm(farmer)
        farm.delete()

        farmer.refresh_from_db()
        assert farmer.status == Farmer.Status.VERIFIED

    def test_deleting_farmer_cascades_without_error(self, make_farmer, make_farm):
        farmer = make_farmer()
        make_farm(farmer)

        farmer.delete()

        assert not Farmer.objects.filter(pk=farmer.pk).exists()

    def test_update_is_idempotent(self, make_farmer):
        farmer = make_farmer()
        before = farmer.updated_at

        assert update_farmer_status_by_farms(farmer) == Farmer.Status.ENROLLED
        farmer.refresh_from_db()
        assert farmer.updated_at == before
