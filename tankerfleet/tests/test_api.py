"""
End-to-end tests through the HTTP API
"""
from tankerfleet.models.trip import Trip
from tankerfleet.tests.conftest import actor_headers, make_driver, make_owner, make_route, make_slabs


class TestAccess:

    def test_health_check(self, client):
        response = client.get('/api/health-check')
        assert response.status_code == 200
        assert response.get_json()['database'] is True

    def test_missing_actor(self, client):
        assert client.get('/api/drivers').status_code == 401

    def test_wrong_role(self, client, db):
        driver = make_driver(make_owner())
        assert client.get('/api/drivers', headers=actor_headers('driver', driver.id)).status_code == 403

    def test_expired_subscription(self, client, db):
        owner = make_owner(active=False)
        response = client.get('/api/drivers', headers=actor_headers('owner', owner.id))
        assert response.status_code == 402

    def test_unknown_endpoint(self, client):
        assert client.get('/api/nope').status_code == 404


class TestOwnerSetup:

    def test_driver_route_and_slab_crud(self, client, db):
        owner = make_owner()
        headers = actor_headers('owner', owner.id)

        response = client.post('/api/drivers', json={'name': 'Suresh', 'phone': '98450'}, headers=headers)
        assert response.status_code == 201
        driver_id = response.get_json()['id']

        response = client.post('/api/routes', json={'source': 'Lake', 'destinations': ['A', 'B'],
                                                    'rate_per_trip': 450}, headers=headers)
        assert response.status_code == 201
        assert response.get_json()['name'] == 'Lake → A, B'

        response = client.post('/api/payout_slabs', json={'min_trips': 0, 'max_trips': 49, 'payout_amount': 0},
                               headers=headers)
        assert response.status_code == 201
        response = client.post('/api/payout_slabs', json={'min_trips': 40, 'max_trips': 60, 'payout_amount': 9},
                               headers=headers)
        assert response.status_code == 400
        assert 'overlaps' in response.get_json()['error']

        response = client.get('/api/drivers', headers=headers)
        assert [d['id'] for d in response.get_json()] == [driver_id]

        assert client.delete(f'/api/drivers/{driver_id}', headers=headers).status_code == 200
        assert client.get('/api/drivers', headers=headers).get_json() == []

    def test_slab_validation_rejects_bad_input(self, client, db):
        headers = actor_headers('owner', make_owner().id)
        response = client.post('/api/payout_slabs', json={'min_trips': 10, 'max_trips': 5, 'payout_amount': 1},
                               headers=headers)
        assert response.status_code == 400
        response = client.post('/api/payout_slabs', json={'min_trips': -1, 'max_trips': 5, 'payout_amount': 1},
                               headers=headers)
        assert response.status_code == 400

    def test_slab_gap_report(self, client, db):
        owner = make_owner()
        make_slabs(owner, [(0, 9, 0), (20, 29, 100)])
        response = client.get('/api/payout_slabs/validation', headers=actor_headers('owner', owner.id))
        assert response.get_json() == {'valid': False, 'problems': ["No slab covers 10-19 trips"]}


class TestJobFlow:

    def test_full_job_flow(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        make_slabs(owner)
        owner_headers = actor_headers('owner', owner.id)
        driver_headers = actor_headers('driver', driver.id)

        response = client.post('/api/jobs', json={'driver_id': driver.id, 'route_id': route.id},
                               headers=owner_headers)
        assert response.status_code == 201
        job_id = response.get_json()['id']

        response = client.post(f'/api/jobs/{job_id}/start', headers=driver_headers)
        assert response.get_json()['job']['status'] == 'in_progress'

        for stop_index in range(3):
            for kind in ('arrived', 'fulfilled'):
                response = client.post(f'/api/jobs/{job_id}/actions',
                                       json={'stop_index': stop_index, 'kind': kind}, headers=driver_headers)
                assert response.status_code == 200

        response = client.get(f'/api/jobs/{job_id}', headers=owner_headers)
        assert response.get_json()['timeline']['can_complete'] is True

        response = client.post(f'/api/jobs/{job_id}/complete', headers=driver_headers)
        assert response.status_code == 200
        body = response.get_json()
        assert body['job']['status'] == 'completed'
        assert body['trip_id'] == Trip.query.one().id

        response = client.post(f'/api/jobs/{job_id}/complete', headers=driver_headers)
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'job_completed'

        response = client.get(f'/api/drivers/{driver.id}/payout', headers=driver_headers)
        assert response.status_code == 200
        assert response.get_json()['aggregate']['total_trips'] == 1

    def test_incomplete_stops_conflict(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        job_id = client.post('/api/jobs', json={'driver_id': driver.id, 'route_id': route.id},
                             headers=actor_headers('owner', owner.id)).get_json()['id']
        client.post(f'/api/jobs/{job_id}/actions', json={'stop_index': 0, 'kind': 'arrived'},
                    headers=actor_headers('driver', driver.id))
        response = client.post(f'/api/jobs/{job_id}/complete', headers=actor_headers('driver', driver.id))
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'stops_incomplete'

    def test_other_driver_forbidden(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        stranger = make_driver(owner, "Mahesh")
        route = make_route(owner)
        job_id = client.post('/api/jobs', json={'driver_id': driver.id, 'route_id': route.id},
                             headers=actor_headers('owner', owner.id)).get_json()['id']
        response = client.post(f'/api/jobs/{job_id}/start', headers=actor_headers('driver', stranger.id))
        assert response.status_code == 403

    def test_invalid_action_kind(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        job_id = client.post('/api/jobs', json={'driver_id': driver.id, 'route_id': route.id},
                             headers=actor_headers('owner', owner.id)).get_json()['id']
        response = client.post(f'/api/jobs/{job_id}/actions', json={'stop_index': 0, 'kind': 'completed'},
                               headers=actor_headers('driver', driver.id))
        assert response.status_code == 400

    def test_request_and_approve(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        response = client.post('/api/jobs/requests', json={'route_id': route.id},
                               headers=actor_headers('driver', driver.id))
        assert response.get_json()['status'] == 'requested'
        job_id = response.get_json()['id']

        response = client.get('/api/jobs?status=requested', headers=actor_headers('owner', owner.id))
        assert [j['id'] for j in response.get_json()] == [job_id]

        response = client.post(f'/api/jobs/{job_id}/approve', headers=actor_headers('owner', owner.id))
        assert response.get_json()['job']['status'] == 'assigned'

    def test_invalid_status_filter(self, client, db):
        owner = make_owner()
        response = client.get('/api/jobs?status=lost', headers=actor_headers('owner', owner.id))
        assert response.status_code == 400


class TestTripsAndReports:

    def test_manual_trip_and_listing(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        headers = actor_headers('driver', driver.id)
        response = client.post('/api/trips', json={'route_id': route.id, 'date': '2024-06-01', 'count': 2},
                               headers=headers)
        assert response.status_code == 201
        # Naive dates are display-timezone midnight
        assert response.get_json()['date'] == '2024-05-31T18:30:00Z'

        response = client.get('/api/trips?start_date=2024-06-01&end_date=2024-06-01', headers=headers)
        assert [t['count'] for t in response.get_json()] == [2]

    def test_manual_trip_rejects_bad_count(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        response = client.post('/api/trips', json={'route_id': route.id, 'date': '2024-06-01', 'count': 0},
                               headers=actor_headers('driver', driver.id))
        assert response.status_code == 400

    def test_settlement_endpoint(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner, rate_per_trip=300)
        client.post('/api/trips', json={'driver_id': driver.id, 'route_id': route.id,
                                        'date': '2024-06-10', 'count': 4},
                    headers=actor_headers('owner', owner.id))
        response = client.post('/api/reports/settlement',
                               json={'start_date': '2024-06-01', 'end_date': '2024-06-30',
                                     'deductions': {str(driver.id): 200}},
                               headers=actor_headers('owner', owner.id))
        assert response.status_code == 200
        assert response.get_json()['net_payable'] == 1000

    def test_payout_insights_endpoint(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        make_slabs(owner)
        response = client.get(f'/api/drivers/{driver.id}/payout-insights',
                              headers=actor_headers('driver', driver.id))
        assert response.status_code == 200
        body = response.get_json()
        assert body['ai_insights'] == []
        assert body['next_slab_target']['trips_needed'] == 50

    def test_bad_month(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        response = client.get(f'/api/drivers/{driver.id}/payout?month=2024-13',
                              headers=actor_headers('owner', owner.id))
        assert response.status_code == 400


class TestSubscriptionEndpoints:

    def test_admin_activation_and_renewal(self, client, db):
        owner = make_owner(active=False)
        admin = actor_headers('admin', 1)

        response = client.post(f'/api/admin/owners/{owner.id}/activate', headers=admin)
        assert response.status_code == 200
        assert response.get_json()['subscription_key'].startswith('KEY-')

        key = client.post('/api/admin/subscription-keys', headers=admin).get_json()['key']
        response = client.post('/api/subscription/renew', json={'subscription_key': key},
                               headers=actor_headers('owner', owner.id))
        assert response.status_code == 200
        assert response.get_json()['subscription_key'] == key

        response = client.post('/api/subscription/renew', json={'subscription_key': key},
                               headers=actor_headers('owner', owner.id))
        assert response.status_code == 400


class TestDriverLocation:

    def test_location_updates(self, client, db):
        owner = make_owner()
        driver = make_driver(owner)
        response = client.put(f'/api/drivers/{driver.id}/location',
                              json={'latitude': 12.97, 'longitude': 77.59, 'heading': 90},
                              headers=actor_headers('driver', driver.id))
        assert response.status_code == 200
        fleet = client.get('/api/fleet/locations', headers=actor_headers('owner', owner.id)).get_json()
        assert fleet[0]['driver_id'] == driver.id
        assert fleet[0]['latitude'] == 12.97

        response = client.put(f'/api/drivers/{driver.id}/location', json={'latitude': 120, 'longitude': 0},
                              headers=actor_headers('driver', driver.id))
        assert response.status_code == 400
