"""
Tests for the farmer, cluster and certificate endpoints.
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from farmers.models import Certificate, Cluster, Farmer
from farmers.services.certificate_service import (
    CertificateGenerator,
    certificate_id_for,
    farm_area_hectares,
)

FARMERS_URL = '/api/farmers/'
CLUSTERS_URL = '/api/clusters/'
CERTIFICATES_URL = '/api/certificates/'

SQUARE_POLYGON = [
    {'latitude': 9.0, 'longitude': 7.0},
    {'latitude': 9.0, 'longitude': 7.01},
    {'latitude': 9.01, 'longitude': 7.01},
    {'latitude': 9.01, 'longitude': 7.0},
]


def farmer_payload(**overrides):
    payload = {
        'nin': '22233344455',
        'first_name': 'Aisha',
        'last_name': 'Bello',
        'phone': '08031112222',
        'gender': 'Female',
        'state': 'Kaduna',
        'lga': 'Zaria',
        'ward': 'Samaru',
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def cluster(db):
    return Cluster.objects.create(
        title='Zaria Maize Growers',
        cluster_lead_first_name='Usman',
        cluster_lead_last_name='Ali',
        cluster_lead_email='usman@ccsa.test',
        cluster_lead_phone='08030000000',
    )


@pytest.mark.django_db
class TestFarmerList:

    def test_requires_permission(self, viewer_client):
        response = viewer_client.get(FARMERS_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_paginated_shape(self, agent_client, make_farmer):
        for _ in range(3):
            make_farmer()

        response = agent_client.get(FARMERS_URL, {'page': 2, 'limit': 2})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['farmers']) == 1
        assert response.data['pagination'] == {'page': 2, 'limit': 2, 'total': 3, 'pages': 2}

    def test_multi_term_search_matches_every_term(self, agent_client, make_farmer):
        make_farmer(first_name='John', last_name='Doe')
        make_farmer(first_name='John', last_name='Smith')
        make_farmer(first_name='Jane', last_name='Doe')

        response = agent_client.get(FARMERS_URL, {'search': 'john doe'})

        names = [(f['first_name'], f['last_name']) for f in response.data['farmers']]
        assert names == [('John', 'Doe')]

    def test_single_term_search_matches_nin(self, agent_client, make_farmer):
        make_farmer(nin='99988877766')
        make_farmer()

        response = agent_client.get(FARMERS_URL, {'search': '99988877'})

        assert response.data['pagination']['total'] == 1

    def test_state_status_and_cluster_filters(self, agent_client, make_farmer, cluster):
        make_farmer(state='Kano State', cluster=cluster)
        make_farmer(state='Kano', status=Farmer.Status.VERIFIED)
        make_farmer(state='Lagos')

        assert agent_client.get(FARMERS_URL, {'state': 'kano'}).data['pagination']['total'] == 2
        assert agent_client.get(FARMERS_URL, {'status': 'Verified'}).data['pagination']['total'] == 1
        assert agent_client.get(FARMERS_URL, {'status': 'all'}).data['pagination']['total'] == 3
        assert agent_client.get(FARMERS_URL, {'cluster': str(cluster.id)}).data['pagination']['total'] == 1

    def test_date_range_filter(self, agent_client, make_farmer):
        old = make_farmer()
        Farmer.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=40))
        make_farmer()

        start = (timezone.localdate() - timedelta(days=7)).isoformat()
        response = agent_client.get(FARMERS_URL, {'startDate': start})

        assert response.data['pagination']['total'] == 1


@pytest.mark.django_db
class TestFarmerCreate:

    def test_create_records_agent_and_status(self, agent_client, agent_user):
        response = agent_client.post(FARMERS_URL, farmer_payload(), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        farmer = Farmer.objects.get(pk=response.data['id'])
        assert farmer.agent == agent_user
        assert farmer.status == Farmer.Status.ENROLLED
        assert str(farmer.phone) == '+2348031112222'
        assert response.data['farms'] == []

    def test_status_in_payload_is_ignored(self, agent_client):
        response = agent_client.post(FARMERS_URL, farmer_payload(status='Verified'), format='json')

        assert response.data['status'] == Farmer.Status.ENROLLED

    def test_inline_farm_captured(self, agent_client):
        payload = farmer_payload(primary_crop='Maize', secondary_crop='Beans', farm_polygon=SQUARE_POLYGON)

        response = agent_client.post(FARMERS_URL, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == Farmer.Status.FARM_CAPTURED
        farm = response.data['farms'][0]
        assert farm['secondary_crop'] == ['Beans']
        assert farm['farm_state'] == 'Kaduna'
        assert farm['farm_size'] > 100

    def test_duplicate_nin_conflict(self, agent_client, make_farmer):
        make_farmer(nin='22233344455')

        response = agent_client.post(FARMERS_URL, farmer_payload(), format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'A farmer with this NIN already exists'

    def test_duplicate_phone_conflict(self, agent_client, make_farmer):
        make_farmer(phone='+2348031112222')

        response = agent_client.post(FARMERS_URL, farmer_payload(), format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'phone' in response.data['error']

    def test_invalid_nin_rejected(self, agent_client):
        response = agent_client.post(FARMERS_URL, farmer_payload(nin='12345'), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'nin' in response.data['details']

    def test_short_inline_polygon_rejected(self, agent_client):
        payload = farmer_payload(farm_polygon=SQUARE_POLYGON[:2])

        response = agent_client.post(FARMERS_URL, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'farm_polygon' in response.data['details']
        assert not Farmer.objects.exists()


@pytest.mark.django_db
class TestFarmerDetail:

    def test_retrieve_includes_farms_and_cluster(self, agent_client, make_farmer, make_farm, cluster):
        farmer = make_farmer(cluster=cluster)
        make_farm(farmer)

        response = agent_client.get(f'{FARMERS_URL}{farmer.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['farms']) == 1
        assert response.data['cluster']['title'] == 'Zaria Maize Growers'
        assert response.data['farms_count'] == 1

    def test_manual_verification(self, agent_client, make_farmer):
        farmer = make_farmer()

        response = agent_client.patch(f'{FARMERS_URL}{farmer.id}/', {'status': 'Verified'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Verified'

    def test_update_to_taken_phone_conflicts(self, agent_client, make_farmer):
        make_farmer(phone='+2348039998888')
        farmer = make_farmer()

        response = agent_client.patch(f'{FARMERS_URL}{farmer.id}/', {'phone': '08039998888'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_delete_requires_permission(self, agent_client, make_farmer):
        farmer = make_farmer()
        response = agent_client.delete(f'{FARMERS_URL}{farmer.id}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_can_delete(self, admin_client, make_farmer):
        farmer = make_farmer()
        response = admin_client.delete(f'{FARMERS_URL}{farmer.id}/')
        assert response.status_code == status.HTTP_200_OK
        assert not Farmer.objects.filter(pk=farmer.pk).exists()


@pytest.mark.django_db
class TestClusters:

    def test_list_with_counts_and_stats(self, admin_client, make_farmer, make_farm, cluster):
        other = Cluster.objects.create(
            title='Kano Rice', cluster_lead_first_name='A', cluster_lead_last_name='B',
            cluster_lead_email='a@b.test', cluster_lead_phone='0803', is_active=False,
        )
        farmer = make_farmer(cluster=cluster)
        make_farm(farmer)
        make_farmer(cluster=cluster)
        make_farmer()

        data = admin_client.get(CLUSTERS_URL).data

        counts = {c['title']: c['farmers_count'] for c in data['clusters']}
        assert counts == {'Zaria Maize Growers': 2, 'Kano Rice': 0}
        assert data['stats'] == {'totalClusters': 2, 'activeClusters': 1, 'totalFarmers': 2, 'totalFarms': 1}
        assert data['topClusters'][0] == {'name': 'Zaria Maize Growers', 'value': 2}
        assert other.title in counts

    def test_duplicate_title_conflict(self, admin_client, cluster):
        response = admin_client.post(CLUSTERS_URL, {
            'title': 'zaria maize growers',
            'cluster_lead_first_name': 'X',
            'cluster_lead_last_name': 'Y',
            'cluster_lead_email': 'x@y.test',
            'cluster_lead_phone': '0803',
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_create_and_delete(self, admin_client, make_farmer):
        response = admin_client.post(CLUSTERS_URL, {
            'title': 'Abuja Yam',
            'cluster_lead_first_name': 'Ngozi',
            'cluster_lead_last_name': 'Eze',
            'cluster_lead_email': 'ngozi@ccsa.test',
            'cluster_lead_phone': '08031230000',
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        cluster_id = response.data['id']
        farmer = make_farmer(cluster_id=cluster_id)

        response = admin_client.delete(f'{CLUSTERS_URL}{cluster_id}/')

        assert response.status_code == status.HTTP_200_OK
        farmer.refresh_from_db()
        assert farmer.cluster is None


@pytest.mark.django_db
class TestCertificates:

    def test_certificate_id_format(self, make_farmer):
        farmer = make_farmer()
        certificate_id = certificate_id_for(farmer, year=2025)
        assert certificate_id == f"CCSA-2025-{str(farmer.id)[-6:].upper()}"

    def test_farm_area_falls_back_to_polygon(self, make_farmer, make_farm):
        farm = make_farm(make_farmer(), farm_size=None, farm_polygon=SQUARE_POLYGON)
        assert farm_area_hectares(farm) > 100

    def test_generator_renders_pdf(self, make_farmer, make_farm, cluster):
        farmer = make_farmer(cluster=cluster)
        make_farm(farmer, farm_polygon=SQUARE_POLYGON)
        make_farm(farmer)

        pdf = CertificateGenerator().generate(farmer)

        assert pdf.startswith(b'%PDF')

    def test_generate_endpoint_upserts_record(self, admin_client, make_farmer):
        farmer = make_farmer(first_name='Aisha', last_name='Bello')

        first = admin_client.post(f'{CERTIFICATES_URL}generate/', {'farmer_id': str(farmer.id)}, format='json')
        second = admin_client.post(f'{CERTIFICATES_URL}generate/', {'farmer_id': str(farmer.id)}, format='json')

        assert first.status_code == status.HTTP_200_OK
        assert second['Content-Type'] == 'application/pdf'
        assert 'CCSA-Certificate-Aisha-Bello.pdf' in second['Content-Disposition']
        assert Certificate.objects.filter(farmer=farmer).count() == 1
        assert Certificate.objects.get(farmer=farmer).status == 'active'

    def test_generate_unknown_farmer(self, admin_client):
        response = admin_client.post(
            f'{CERTIFICATES_URL}generate/',
            {'farmer_id': '00000000-0000-0000-0000-000000000000'},
            format='json'
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_list_status_filter(self, admin_client, make_farmer):
        with_certificate = make_farmer()
        make_farmer()
        Certificate.objects.create(
            certificate_id=certificate_id_for(with_certificate),
            farmer=with_certificate,
            issued_date=timezone.now(),
        )

        generated = admin_client.get(CERTIFICATES_URL, {'status': 'generated'}).data
        pending = admin_client.get(CERTIFICATES_URL, {'status': 'pending'}).data

        assert [f['id'] for f in generated['farmers']] == [str(with_certificate.id)]
        assert generated['farmers'][0]['latest_certificate']['status'] == 'active'
        assert pending['pagination']['total'] == 1

    def test_public_verification(self, api_client, make_farmer):
        farmer = make_farmer()
        certificate = Certificate.objects.create(
            certificate_id=certificate_id_for(farmer),
            farmer=farmer,
            issued_date=timezone.now(),
        )

        response = api_client.get(f'{CERTIFICATES_URL}verify/{certificate.certificate_id.lower()}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['valid'] is True
        assert response.data['farmer']['nin'] == f"****{farmer.nin[-4:]}"

    def test_public_verification_unknown(self, api_client):
        response = api_client.get(f'{CERTIFICATES_URL}verify/CCSA-2020-ABCDEF/')
        assert response.status_code == status.HTTP_404_NOT_FOUND
