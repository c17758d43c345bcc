from datetime import date, timedelta

import pytest
from flask_jwt_extended import create_access_token

from extensions import db
from staybook import create_app
from staybook.models.coupon import Coupon, DiscountType
from staybook.models.property import Property
from staybook.models.reservation import Reservation, ReservationStatus
from staybook.models.user import User


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def future():
    """Day offset helper: future(30) is 30 days from today"""
    today = date.today()
    return lambda days: today + timedelta(days=days)


@pytest.fixture
def make_property(app):
    def _make(**overrides):
        fields = {
            'slug': 'chalet-du-lac',
            'name_fr': 'Chalet du lac',
            'name_en': 'Lake Chalet',
            'price_per_night': 250,
            'cleaning_fee': 85,
            'currency': 'CAD',
            'min_nights': 1,
            'max_guests': 6,
            'instant_booking': True,
            'is_active': True,
        }
        fields.update(overrides)
        property = Property(**fields)
        db.session.add(property)
        db.session.commit()
        return property
    return _make


@pytest.fixture
def property(make_property):
    return make_property()


@pytest.fixture
def make_coupon(app):
    def _make(**overrides):
        fields = {
            'code': 'SUMMER10',
            'discount_type': DiscountType.PERCENTAGE,
            'discount_value': 10,
            'is_active': True,
        }
        fields.update(overrides)
        coupon = Coupon(**fields)
        db.session.add(coupon)
        db.session.commit()
        return coupon
    return _make


@pytest.fixture
def make_reservation(app):
    counter = {'n': 0}

    def _make(property, check_in, check_out, **overrides):
        counter['n'] += 1
        nights = (check_out - check_in).days
        fields = {
            'property_id': property.id,
            'confirmation_code': f"SB-TEST-{counter['n']:04d}",
            'status': ReservationStatus.CONFIRMED,
            'check_in': check_in,
            'check_out': check_out,
            'nights': nights,
            'guests': 2,
            'guest_first_name': 'Marie',
            'guest_last_name': 'Tremblay',
            'guest_email': 'marie@example.com',
            'price_per_night': property.price_per_night,
            'subtotal': property.price_per_night * nights,
            'total': property.price_per_night * nights,
            'currency': 'CAD',
        }
        fields.update(overrides)
        reservation = Reservation(**fields)
        db.session.add(reservation)
        db.session.commit()
        return reservation
    return _make


@pytest.fixture
def admin(app):
    user = User(email='admin@staybook.test', password='correct-horse',
                first_name='Ada', last_name='Admin', is_admin=True)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_headers(admin):
    token = create_access_token(identity=str(admin.id))
    return {'Authorization': f'Bearer {token}'}


def booking_payload(property, check_in=None, check_out=None, **overrides):
    payload = {
        'property_id': property.id,
        'check_in': check_in.isoformat() if check_in else None,
        'check_out': check_out.isoformat() if check_out else None,
        'guests': 2,
        'guest': {
            'first_name': 'Jean',
            'last_name': 'Gagnon',
            'email': 'jean@example.com',
            'phone': '+1 514 555 0100',
        },
        'message': 'Arriving late',
        'language': 'fr',
    }
    payload.update(overrides)
    return payload
