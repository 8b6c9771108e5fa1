"""
Tests for the farm endpoints, the GIS map payload and farm analytics.
"""
import uuid

import pytest
from rest_framework import status

from accounts.models import Role, UserRoleAssignment
from accounts.permissions_config import PERMISSIONS
from farmers.models import Farmer
from farms.models import Farm
from farms.services.geojson import build_farm_geojson

FARMS_URL = '/api/farms/'
GEOJSON_URL = '/api/farms/geojson/'
ANALYTICS_URL = '/api/farms/analytics/'

POLYGON = [
    {'latitude': 9.0, 'longitude': 7.0, 'accuracy': 3.5},
    {'latitude': 9.0, 'longitude': 7.01},
    {'latitude': 9.01, 'longitude': 7.01},
    {'latitude': 9.01, 'longitude': 7.0},
]

LEGACY_POLYGONS = [
    [[7.0, 9.0], [7.01, 9.0], [7.01, 9.01]],
    '[{"lat": 9.0, "lng": 7.0}, {"lat": 9.0, "lng": 7.01}, {"lat": 9.01, "lng": 7.01}]',
    {'type': 'Polygon', 'coordinates': [[[7.0, 9.0], [7.01, 9.0], [7.01, 9.01], [7.0, 9.0]]]},
    [[[7.0, 9.0], [7.01, 9.0], [7.01, 9.01]]],
]


@pytest.mark.django_db
class TestFarmList:

    def test_viewer_cannot_list(self, viewer_client):
        response = viewer_client.get(FARMS_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_filter_by_farmer(self, agent_client, make_farmer, make_farm):
        owner = make_farmer()
        other = make_farmer()
        make_farm(owner)
        make_farm(owner)
        make_farm(other)

        response = agent_client.get(FARMS_URL, {'farmerId': str(owner.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pagination']['total'] == 2
        assert {farm['farmer_id'] for farm in response.data['farms']} == {str(owner.id)}

    def test_filter_by_state_and_search(self, agent_client, make_farmer, make_farm):
        make_farm(make_farmer(first_name='Halima', state='Kaduna'), farm_state='Kaduna')
        make_farm(make_farmer(first_name='Ibrahim'), farm_state='Kano')

        by_state = agent_client.get(FARMS_URL, {'state': 'kad'})
        by_name = agent_client.get(FARMS_URL, {'search': 'ibra'})

        assert [f['farm_state'] for f in by_state.data['farms']] == ['Kaduna']
        assert [f['farmer_name'] for f in by_name.data['farms']] == ['Ibrahim Okafor']

    def test_legacy_polygon_shapes_are_returned_as_stored(self, agent_client, make_farmer, make_farm):
        owner = make_farmer()
        for polygon in LEGACY_POLYGONS:
            make_farm(owner, farm_polygon=polygon)

        response = agent_client.get(FARMS_URL, {'farmerId': str(owner.id)})

        assert response.status_code == status.HTTP_200_OK
        returned = [farm['farm_polygon'] for farm in response.data['farms']]
        assert sorted(map(str, returned)) == sorted(map(str, LEGACY_POLYGONS))


@pytest.mark.django_db
class TestFarmCreate:

    def test_creates_farm_and_derives_size(self, agent_client, make_farmer):
        farmer = make_farmer()

        response = agent_client.post(FARMS_URL, {
            'farmer_id': str(farmer.id),
            'primary_crop': 'Rice',
            'secondary_crop': ['Beans', ' '],
            'farm_polygon': POLYGON,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert 115 < response.data['farm_size'] < 130
        assert response.data['secondary_crop'] == ['Beans']
        stored = Farm.objects.get().farm_polygon
        assert stored[0] == {'latitude': 9.0, 'longitude': 7.0, 'accuracy': 3.5}
        assert stored[1] == {'latitude': 9.0, 'longitude': 7.01}

    def test_explicit_size_is_kept(self, agent_client, make_farmer):
        farmer = make_farmer()

        response = agent_client.post(FARMS_URL, {
            'farmer_id': str(farmer.id), 'farm_size': 4.2, 'farm_polygon': POLYGON,
        }, format='json')

        assert response.data['farm_size'] == 4.2

    def test_first_farm_moves_farmer_to_farm_captured(self, agent_client, make_farmer):
        farmer = make_farmer()

        agent_client.post(FARMS_URL, {'farmer_id': str(farmer.id), 'farm_polygon': POLYGON}, format='json')

        farmer.refresh_from_db()
        assert farmer.status == Farmer.Status.FARM_CAPTURED

    def test_unknown_farmer(self, agent_client):
        response = agent_client.post(FARMS_URL, {
            'farmer_id': str(uuid.uuid4()), 'farm_polygon': POLYGON,
        }, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_polygon_needs_three_points(self, agent_client, make_farmer):
        farmer = make_farmer()

        response = agent_client.post(FARMS_URL, {
            'farmer_id': str(farmer.id), 'farm_polygon': POLYGON[:2],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'farm_polygon' in response.data['details']
        assert not Farm.objects.exists()

    def test_polygon_is_required(self, agent_client, make_farmer):
        response = agent_client.post(FARMS_URL, {'farmer_id': str(make_farmer().id)}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestFarmDetail:

    def test_string_polygon_detail(self, agent_client, make_farmer, make_farm):
        farm = make_farm(make_farmer(), farm_polygon=LEGACY_POLYGONS[1])

        response = agent_client.get(f'{FARMS_URL}{farm.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['farm_polygon'] == LEGACY_POLYGONS[1]

    def test_farmer_detail_with_legacy_polygon(self, agent_client, make_farmer, make_farm):
        owner = make_farmer()
        make_farm(owner, farm_polygon=LEGACY_POLYGONS[0])

        response = agent_client.get(f'/api/farmers/{owner.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['farms'][0]['farm_polygon'] == LEGACY_POLYGONS[0]

    def test_polygon_change_recomputes_size(self, agent_client, make_farmer, make_farm):
        farm = make_farm(make_farmer(), farm_size=1.0)

        response = agent_client.patch(f'{FARMS_URL}{farm.id}/', {'farm_polygon': POLYGON}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['farm_size'] > 100

    def test_agent_cannot_delete(self, agent_client, make_farmer, make_farm):
        farm = make_farm(make_farmer())
        response = agent_client.delete(f'{FARMS_URL}{farm.id}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_deletes_last_farm(self, admin_client, make_farmer, make_farm):
        farmer = make_farmer()
        farm = make_farm(farmer)

        response = admin_client.delete(f'{FARMS_URL}{farm.id}/')

        assert response.status_code == status.HTTP_200_OK
        farmer.refresh_from_db()
        assert farmer.status == Farmer.Status.ENROLLED


@pytest.mark.django_db
class TestFarmGeoJSON:

    def test_payload_and_statistics(self, admin_client, make_farmer, make_farm):
        verified = make_farmer(status=Farmer.Status.VERIFIED)
        make_farm(verified, farm_polygon=POLYGON, farm_size=3, primary_crop='Rice')
        make_farm(make_farmer(), farm_size=2, primary_crop='Rice')

        response = admin_client.get(GEOJSON_URL)

        assert response.status_code == status.HTTP_200_OK
        stats = response.data['statistics']
        assert stats['total'] == 2
        assert stats['verified'] == 1
        assert stats['pending'] == 1
        assert stats['totalArea'] == 5
        assert stats['cropStats'] == {'Rice': 2}
        assert stats['invalidCoordinates'] == 0

        feature = response.data['geoJson']['features'][0]
        assert feature['geometry']['type'] == 'Polygon'
        ring = feature['geometry']['coordinates'][0]
        assert ring[0] == ring[-1]

    def test_farm_without_geometry_is_counted_invalid(self, admin_client, make_farmer, make_farm):
        make_farm(make_farmer(), farm_latitude=None, farm_longitude=None)
        make_farm(make_farmer(), farm_coordinates='not a polygon', farm_latitude=None, farm_longitude=None)
        make_farm(make_farmer())

        response = admin_client.get(GEOJSON_URL)

        assert response.data['statistics']['invalidCoordinates'] == 2
        assert response.data['metadata']['totalFarmsInDb'] == 3
        assert len(response.data['farms']) == 1
        assert response.data['farms'][0]['coordinatesCount'] == 5

    def test_unparseable_coordinates_do_not_stop_the_batch(self, admin_client, make_farmer, make_farm):
        make_farm(make_farmer(), farm_polygon=POLYGON)
        make_farm(make_farmer(), farm_coordinates=LEGACY_POLYGONS[0], farm_latitude=None, farm_longitude=None)
        broken = make_farm(
            make_farmer(), farm_coordinates='{"type": "Polygon", "coord',
            farm_latitude=None, farm_longitude=None,
        )
        with_gps = make_farm(make_farmer(), farm_coordinates='[[not json')

        response = admin_client.get(GEOJSON_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['statistics']['invalidCoordinates'] == 1
        assert response.data['statistics']['total'] == 3
        ids = {feature['properties']['id'] for feature in response.data['geoJson']['features']}
        assert str(broken.id) not in ids
        assert str(with_gps.id) in ids

    def test_state_filter(self, admin_client, make_farmer, make_farm):
        make_farm(make_farmer(), farm_state='Kano')
        make_farm(make_farmer(), farm_state='Oyo')

        response = admin_client.get(GEOJSON_URL, {'state': 'oyo'})

        assert [farm['state'] for farm in response.data['farms']] == ['Oyo']

    def test_viewer_role_has_map_access(self, viewer_client, viewer_user):
        role = Role.objects.create(name='Map Viewer', permissions=[PERMISSIONS['GIS_VIEW']])
        UserRoleAssignment.objects.create(user=viewer_user, role=role)

        response = viewer_client.get(GEOJSON_URL)

        assert response.status_code == status.HTTP_200_OK

    def test_viewer_without_role_is_forbidden(self, viewer_client):
        response = viewer_client.get(GEOJSON_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_coordinates_take_precedence_over_polygon(self, make_farmer, make_farm):
        farm = make_farm(
            make_farmer(),
            farm_polygon=POLYGON,
            farm_coordinates=[[[8.0, 10.0], [8.01, 10.0], [8.01, 10.01]]],
        )

        data = build_farm_geojson([farm])

        assert data['farms'][0]['coordinates'][0] == [8.0, 10.0]
        assert data['farms'][0]['coordinatesLatLng'][0] == [10.0, 8.0]


@pytest.mark.django_db
class TestFarmAnalytics:

    def test_totals_and_top_series(self, agent_client, make_farmer, make_farm):
        make_farm(make_farmer(), farm_size=2, farm_state='kano', primary_crop='maize')
        make_farm(make_farmer(), farm_size=4, farm_state='Kano State', primary_crop='Maize')
        make_farm(make_farmer(), farm_size=3, farm_state='Oyo', primary_crop='Cassava')

        response = agent_client.get(ANALYTICS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalFarms'] == 3
        assert response.data['totalArea'] == 9
        assert response.data['avgSize'] == 3.0
        assert response.data['farmsByState'][0] == {'name': 'Kano', 'value': 2}
        assert response.data['farmsByCrop'][0] == {'name': 'Maize', 'value': 2}
