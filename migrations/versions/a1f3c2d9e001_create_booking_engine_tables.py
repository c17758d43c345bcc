"""Create booking engine tables

Revision ID: a1f3c2d9e001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'a1f3c2d9e001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('properties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('name_fr', sa.String(length=200), nullable=False),
        sa.Column('name_en', sa.String(length=200), nullable=True),
        sa.Column('name_es', sa.String(length=200), nullable=True),
        sa.Column('description_fr', sa.Text(), nullable=True),
        sa.Column('description_en', sa.Text(), nullable=True),
        sa.Column('description_es', sa.Text(), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('price_per_night', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('cleaning_fee', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('min_nights', sa.Integer(), nullable=True),
        sa.Column('max_nights', sa.Integer(), nullable=True),
        sa.Column('max_guests', sa.Integer(), nullable=True),
        sa.Column('ical_url', sa.String(length=500), nullable=True),
        sa.Column('ical_last_synced_at', sa.DateTime(), nullable=True),
        sa.Column('ical_last_sync_error', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('is_featured', sa.Boolean(), nullable=True),
        sa.Column('instant_booking', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_properties_slug', 'properties', ['slug'], unique=True)

    op.create_table('blocked_dates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('source', sa.Enum('MANUAL', 'ICAL_IMPORT', name='blockeddatesource'), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('external_uid', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('start_date < end_date', name='ck_blocked_dates_range'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_blocked_dates_property_range', 'blocked_dates',
                    ['property_id', 'start_date', 'end_date'])

    op.create_table('reservations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('confirmation_code', sa.String(length=40), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED',
                                    name='reservationstatus'), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('nights', sa.Integer(), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('guest_first_name', sa.String(length=100), nullable=False),
        sa.Column('guest_last_name', sa.String(length=100), nullable=False),
        sa.Column('guest_email', sa.String(length=255), nullable=False),
        sa.Column('guest_phone', sa.String(length=40), nullable=True),
        sa.Column('guest_message', sa.Text(), nullable=True),
        sa.Column('language', sa.String(length=5), nullable=True),
        sa.Column('price_per_night', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('cleaning_fee', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('service_fee', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('taxes', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('discount_amount', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('coupon_code', sa.String(length=50), nullable=True),
        sa.Column('total', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('check_in < check_out', name='ck_reservations_range'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reservations_confirmation_code', 'reservations', ['confirmation_code'], unique=True)
    op.create_index('ix_reservations_guest_email', 'reservations', ['guest_email'])
    op.create_index('idx_reservations_property_dates', 'reservations',
                    ['property_id', 'check_in', 'check_out'])

    # Two live reservations for the same property can never share a night
    if op.get_bind().dialect.name == 'postgresql':
        op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
        op.execute(
            "ALTER TABLE reservations ADD CONSTRAINT ex_reservations_no_overlap "
            "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out, '[)') WITH &&) "
            "WHERE (status <> 'CANCELLED')"
        )

    op.create_table('inquiries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.Enum('NEW', 'REPLIED', 'CLOSED', name='inquirystatus'), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=True),
        sa.Column('check_out', sa.Date(), nullable=True),
        sa.Column('guests', sa.Integer(), nullable=True),
        sa.Column('guest_first_name', sa.String(length=100), nullable=False),
        sa.Column('guest_last_name', sa.String(length=100), nullable=False),
        sa.Column('guest_email', sa.String(length=255), nullable=False),
        sa.Column('guest_phone', sa.String(length=40), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('language', sa.String(length=5), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('coupons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('discount_type', sa.Enum('PERCENTAGE', 'FIXED', name='discounttype'), nullable=False),
        sa.Column('discount_value', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('max_discount', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('min_subtotal', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('min_nights', sa.Integer(), nullable=True),
        sa.Column('max_nights', sa.Integer(), nullable=True),
        sa.Column('valid_from', sa.DateTime(), nullable=True),
        sa.Column('valid_until', sa.DateTime(), nullable=True),
        sa.Column('applicable_property_ids', sa.JSON(), nullable=True),
        sa.Column('max_redemptions', sa.Integer(), nullable=True),
        sa.Column('max_per_guest', sa.Integer(), nullable=True),
        sa.Column('current_redemptions', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('current_redemptions >= 0', name='ck_coupons_redemptions'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_coupons_code', 'coupons', ['code'], unique=True)

    op.create_table('coupon_redemptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coupon_id', sa.Integer(), nullable=False),
        sa.Column('reservation_id', sa.Integer(), nullable=False),
        sa.Column('guest_email', sa.String(length=255), nullable=False),
        sa.Column('discount_applied', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['coupon_id'], ['coupons.id'], ),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reservation_id')
    )
    op.create_index('ix_coupon_redemptions_coupon_id', 'coupon_redemptions', ['coupon_id'])
    op.create_index('ix_coupon_redemptions_guest_email', 'coupon_redemptions', ['guest_email'])


def downgrade():
    op.drop_index('ix_coupon_redemptions_guest_email', table_name='coupon_redemptions')
    op.drop_index('ix_coupon_redemptions_coupon_id', table_name='coupon_redemptions')
    op.drop_table('coupon_redemptions')
    op.drop_index('ix_coupons_code', table_name='coupons')
    op.drop_table('coupons')
    op.drop_table('inquiries')
    op.drop_index('idx_reservations_property_dates', table_name='reservations')
    op.drop_index('ix_reservations_guest_email', table_name='reservations')
    op.drop_index('ix_reservations_confirmation_code', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('idx_blocked_dates_property_range', table_name='blocked_dates')
    op.drop_table('blocked_dates')
    op.drop_index('ix_properties_slug', table_name='properties')
    op.drop_table('properties')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    if op.get_bind().dialect.name == 'postgresql':
        op.execute('DROP TYPE IF EXISTS discounttype')
        op.execute('DROP TYPE IF EXISTS inquirystatus')
        op.execute('DROP TYPE IF EXISTS reservationstatus')
        op.execute('DROP TYPE IF EXISTS blockeddatesource')
