from datetime import timedelta
from unittest import mock

import requests
from flask_jwt_extended import create_access_token

from extensions import db
from staybook.models.blocked_date import BlockedDate
from staybook.models.user import User
from tests.conftest import booking_payload
from tests.test_ical import FEED, feed_response


# ============================================================
# PUBLIC
# ============================================================

def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'healthy'


def test_get_property(client, property):
    response = client.get(f'/api/properties/{property.slug}')
    assert response.status_code == 200
    assert response.get_json()['property']['name_en'] == 'Lake Chalet'

    assert client.get('/api/properties/unknown').status_code == 404


def test_inactive_property_is_hidden(client, make_property):
    make_property(slug='closed', is_active=False)
    assert client.get('/api/properties/closed').status_code == 404


def test_availability_lists_blocked_and_reserved_days(client, property, make_reservation, future):
    make_reservation(property, future(10), future(12))
    db.session.add(BlockedDate(property_id=property.id, start_date=future(20), end_date=future(21)))
    db.session.commit()

    response = client.get(f'/api/properties/{property.slug}/availability'
                          f'?start_date={future(1).isoformat()}&end_date={future(30).isoformat()}')
    data = response.get_json()

    assert response.status_code == 200
    assert data['disabled_dates'] == [future(10).isoformat(), future(11).isoformat(), future(20).isoformat()]
    assert sorted(b['source'] for b in data['blocked_dates']) == ['manual', 'reservation']


def test_availability_rejects_inverted_window(client, property, future):
    response = client.get(f'/api/properties/{property.slug}/availability'
                          f'?start_date={future(10).isoformat()}&end_date={future(1).isoformat()}')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'validation_error'


def test_pricing_endpoint(client, property, future):
    response = client.get(f'/api/properties/{property.slug}/pricing'
                          f'?check_in={future(30).isoformat()}&check_out={future(33).isoformat()}')
    data = response.get_json()

    assert response.status_code == 200
    assert data['nights'] == 3
    assert data['subtotal'] == 750
    assert data['cleaning_fee'] == 85
    assert data['service_fee'] == 90
    assert data['taxes'] == 139
    assert data['total'] == 1064


def test_pricing_requires_dates(client, property):
    response = client.get(f'/api/properties/{property.slug}/pricing')
    assert response.status_code == 400
    assert response.get_json()['field'] == 'check_in'


def test_calendar_feed(client, property, make_reservation, future):
    make_reservation(property, future(10), future(12))

    response = client.get(f'/api/properties/{property.slug}/calendar.ics')

    assert response.status_code == 200
    assert response.mimetype == 'text/calendar'
    assert b'BEGIN:VEVENT' in response.data


def test_validate_coupon(client, make_coupon):
    make_coupon(code='SUMMER10')

    response = client.post('/api/coupons/validate', json={'code': 'summer10', 'subtotal': 750, 'nights': 3})
    data = response.get_json()

    assert response.status_code == 200
    assert data['valid'] is True
    assert data['discount_amount'] == 75
    assert data['coupon']['code'] == 'SUMMER10'


def test_validate_coupon_reports_reason(client, make_coupon):
    make_coupon(code='FULL', max_redemptions=1, current_redemptions=1)

    response = client.post('/api/coupons/validate', json={'code': 'FULL', 'subtotal': 750, 'nights': 3})
    assert response.status_code == 400
    assert response.get_json() == {'valid': False, 'error': 'limit_reached', 'message': 'Usage limit reached'}

    response = client.post('/api/coupons/validate', json={'code': 'NOPE', 'subtotal': 750, 'nights': 3})
    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'


def test_booking_then_lookup(client, property, future):
    response = client.post('/api/bookings/', json=booking_payload(property, future(30), future(33)))
    data = response.get_json()

    assert response.status_code == 201
    assert data['type'] == 'reservation'

    lookup = client.get(f"/api/bookings/{data['confirmation_code']}")
    assert lookup.status_code == 200
    assert lookup.get_json()['reservation']['pricing']['total'] == 1064
    assert lookup.get_json()['reservation']['property']['slug'] == property.slug


def test_booking_conflict_returns_409(client, property, future):
    client.post('/api/bookings/', json=booking_payload(property, future(30), future(33)))
    response = client.post('/api/bookings/', json=booking_payload(property, future(31), future(34)))

    assert response.status_code == 409
    assert response.get_json()['error'] == 'dates_unavailable'


def test_booking_by_slug_as_inquiry(client, make_property):
    property = make_property(instant_booking=False)
    payload = booking_payload(property)
    del payload['property_id']
    payload['property_slug'] = property.slug

    response = client.post('/api/bookings/', json=payload)
    assert response.status_code == 201
    assert response.get_json()['type'] == 'inquiry'


def test_booking_unknown_property(client):
    response = client.post('/api/bookings/', json={'property_id': 999})
    assert response.status_code == 404


# ============================================================
# ADMIN
# ============================================================

def test_admin_login(client, admin):
    response = client.post('/api/auth/admin/login',
                           json={'email': 'ADMIN@staybook.test', 'password': 'correct-horse'})
    assert response.status_code == 200
    assert response.get_json()['access_token']

    response = client.post('/api/auth/admin/login',
                           json={'email': 'admin@staybook.test', 'password': 'wrong'})
    assert response.status_code == 401


def test_admin_routes_require_admin(client, app):
    assert client.get('/api/admin/coupons').status_code == 401

    user = User(email='guest@staybook.test', password='pw', first_name='G', last_name='Uest')
    db.session.add(user)
    db.session.commit()

    headers = {'Authorization': f'Bearer {create_access_token(identity=str(user.id))}'}
    assert client.get('/api/admin/coupons', headers=headers).status_code == 403


def test_admin_creates_property(client, admin_headers):
    payload = {'slug': 'villa-mer', 'name_fr': 'Villa de la mer', 'price_per_night': 300,
               'min_nights': 2, 'max_nights': 14}

    response = client.post('/api/admin/properties', json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert response.get_json()['property']['currency'] == 'CAD'

    assert client.post('/api/admin/properties', json=payload, headers=admin_headers).status_code == 409

    bad = dict(payload, slug='Villa Mer')
    assert client.post('/api/admin/properties', json=bad, headers=admin_headers).status_code == 400


def test_admin_updates_property_but_not_slug(client, admin_headers, property):
    url = f'/api/admin/properties/{property.id}'

    response = client.put(url, json={'price_per_night': 275, 'instant_booking': False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['property']['price_per_night'] == 275
    assert response.get_json()['property']['instant_booking'] is False

    assert client.put(url, json={'slug': 'renamed'}, headers=admin_headers).status_code == 400


def test_admin_blocks_dates_with_inclusive_end(client, admin_headers, property, future):
    response = client.post(f'/api/admin/properties/{property.id}/blocked-dates',
                           json={'start_date': future(5).isoformat(), 'end_date': future(7).isoformat(),
                                 'reason': 'Painting'},
                           headers=admin_headers)
    assert response.status_code == 201
    blocked = response.get_json()['blocked_date']
    assert blocked['end_date'] == (future(7) + timedelta(days=1)).isoformat()

    listing = client.get(f'/api/admin/properties/{property.id}/blocked-dates', headers=admin_headers)
    assert listing.get_json()['blocked_dates'][0]['last_blocked_date'] == future(7).isoformat()

    response = client.delete(f"/api/admin/blocked-dates/{blocked['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert BlockedDate.query.count() == 0


def test_admin_sync_ical(client, admin_headers, property):
    property.ical_url = 'https://www.airbnb.ca/calendar/ical/1.ics'
    db.session.commit()
    url = f'/api/admin/properties/{property.id}/sync-ical'

    with mock.patch('staybook.services.ical_service.requests.get', return_value=feed_response(FEED)):
        response = client.post(url, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['imported_count'] == 3

    with mock.patch('staybook.services.ical_service.requests.get',
                    side_effect=requests.ConnectionError('refused')):
        response = client.post(url, headers=admin_headers)
    assert response.status_code == 502
    assert response.get_json()['error'] == 'sync_failed'


def test_admin_sync_without_url(client, admin_headers, property):
    response = client.post(f'/api/admin/properties/{property.id}/sync-ical', headers=admin_headers)
    assert response.status_code == 400


def test_admin_coupon_lifecycle(client, admin_headers):
    payload = {'code': 'fall25', 'discount_type': 'fixed', 'discount_value': 40,
               'valid_until': '2030-10-31', 'max_redemptions': 10}

    response = client.post('/api/admin/coupons', json=payload, headers=admin_headers)
    assert response.status_code == 201
    coupon = response.get_json()['coupon']
    assert coupon['code'] == 'FALL25'
    assert coupon['valid_until'].startswith('2030-10-31T23:59:59')

    assert client.post('/api/admin/coupons', json=payload, headers=admin_headers).status_code == 409

    response = client.put(f"/api/admin/coupons/{coupon['id']}",
                          json={'is_active': False, 'current_redemptions': 99}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['coupon']['is_active'] is False
    assert response.get_json()['coupon']['current_redemptions'] == 0

    bad = dict(payload, code='OTHER', discount_type='bogo')
    assert client.post('/api/admin/coupons', json=bad, headers=admin_headers).status_code == 400


def test_admin_lists_redemptions(client, admin_headers, property, make_coupon, future):
    coupon = make_coupon(code='SUMMER10')
    client.post('/api/bookings/', json=booking_payload(property, future(30), future(33), coupon_code='SUMMER10'))

    response = client.get(f'/api/admin/coupons/{coupon.id}/redemptions', headers=admin_headers)
    data = response.get_json()
    assert response.status_code == 200
    assert data['coupon']['current_redemptions'] == 1
    assert data['redemptions'][0]['discount_applied'] == 75


def test_admin_cancels_reservation(client, admin_headers, property, make_reservation, future):
    reservation = make_reservation(property, future(10), future(12))
    url = f'/api/admin/reservations/{reservation.id}/status'

    listing = client.get(f'/api/admin/reservations?property_id={property.id}', headers=admin_headers)
    assert len(listing.get_json()['reservations']) == 1

    response = client.put(url, json={'status': 'cancelled'}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['reservation']['status'] == 'cancelled'

    assert client.put(url, json={'status': 'confirmed'}, headers=admin_headers).status_code == 400

    availability = client.get(f'/api/properties/{property.slug}/availability'
                              f'?start_date={future(1).isoformat()}&end_date={future(30).isoformat()}')
    assert availability.get_json()['disabled_dates'] == []


def test_admin_lists_inquiries(client, admin_headers, make_property):
    property = make_property(instant_booking=False)
    client.post('/api/bookings/', json=booking_payload(property))

    response = client.get('/api/admin/inquiries', headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['inquiries'][0]['guest']['email'] == 'jean@example.com'


def test_validate_coupon_rejects_non_finite_subtotal(client, make_coupon):
    make_coupon(code='SUMMER10')

    for subtotal in ('nan', 'inf', '-Infinity'):
        response = client.post('/api/coupons/validate',
                               json={'code': 'SUMMER10', 'subtotal': subtotal, 'nights': 3})
        assert response.status_code == 400
        assert response.get_json()['field'] == 'subtotal'


def test_admin_rejects_non_finite_price(client, admin_headers, property):
    response = client.put(f'/api/admin/properties/{property.id}',
                          json={'price_per_night': 'inf'}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()['field'] == 'price_per_night'


def test_admin_coupon_accepts_mixed_offset_bounds(client, admin_headers):
    payload = {'code': 'NYE', 'discount_type': 'percentage', 'discount_value': 15,
               'valid_from': '2025-01-01', 'valid_until': '2025-12-31T18:00:00-05:00'}

    response = client.post('/api/admin/coupons', json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert response.get_json()['coupon']['valid_until'] == '2025-12-31T23:00:00'

    inverted = dict(payload, code='NYE2', valid_from='2026-01-01T00:00:00Z')
    response = client.post('/api/admin/coupons', json=inverted, headers=admin_headers)
    assert response.status_code == 400
