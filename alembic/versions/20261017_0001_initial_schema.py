"""Create booking marketplace schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '20261017_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False

def upgrade() -> None:
    # ### Create all tables and ENUM types ###
    bind = op.get_bind()
    dialect_name = bind.dialect.name

    # Define ENUM types for use in table creation (values stored lowercase)
    user_type_enum = sa.Enum('guest', 'host', name='user_type')
    booking_status_enum = sa.Enum('pending', 'confirmed', 'completed', 'cancelled', 'no_show', name='booking_status')
    payment_status_enum = sa.Enum('pending', 'completed', 'refunded', 'failed', name='payment_status')
    notification_type_enum = sa.Enum(
        'booking_created', 'booking_confirmed', 'booking_cancelled', 'booking_completed',
        'booking_no_show', 'new_review', 'payment_completed', 'payment_failed',
        name='notification_type',
    )

    if not _has_table(bind, 'users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('auth_id', sa.String(length=255), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('first_name', sa.String(length=100), nullable=False),
            sa.Column('last_name', sa.String(length=100), nullable=False),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('bio', sa.Text(), nullable=True),
            sa.Column('profile_photo_url', sa.String(length=500), nullable=True),
            sa.Column('user_type', user_type_enum, server_default='guest', nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_auth_id'), 'users', ['auth_id'], unique=True)
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    if not _has_table(bind, 'hotels'):
        op.create_table('hotels',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('host_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('address', sa.String(length=300), nullable=False),
            sa.Column('city', sa.String(length=120), nullable=False),
            sa.Column('country', sa.String(length=120), nullable=False),
            sa.Column('max_guests', sa.Integer(), nullable=False),
            sa.Column('bedrooms', sa.Integer(), server_default='1', nullable=False),
            sa.Column('bathrooms', sa.Integer(), server_default='1', nullable=False),
            sa.Column('price_per_night', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('amenities', sa.JSON(), nullable=False),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.Column('primary_image_url', sa.String(length=500), nullable=True),
            sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('price_per_night > 0', name='ck_hotels_price_positive'),
            sa.CheckConstraint('max_guests > 0', name='ck_hotels_max_guests_positive'),
            sa.CheckConstraint('bedrooms >= 0 AND bathrooms >= 0', name='ck_hotels_rooms_non_negative'),
            sa.ForeignKeyConstraint(['host_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_hotels_id'), 'hotels', ['id'], unique=False)
        op.create_index(op.f('ix_hotels_host_id'), 'hotels', ['host_id'], unique=False)
        op.create_index(op.f('ix_hotels_city'), 'hotels', ['city'], unique=False)

    if not _has_table(bind, 'bookings'):
        op.create_table('bookings',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('hotel_id', sa.Integer(), nullable=False),
            sa.Column('guest_id', sa.Integer(), nullable=False),
            sa.Column('check_in_date', sa.Date(), nullable=False),
            sa.Column('check_out_date', sa.Date(), nullable=False),
            sa.Column('num_guests', sa.Integer(), server_default='1', nullable=False),
            sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('status', booking_status_enum, server_default='pending', nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.Column('cancelled_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('check_out_date > check_in_date', name='ck_bookings_date_order'),
            sa.CheckConstraint('num_guests > 0', name='ck_bookings_num_guests_positive'),
            sa.ForeignKeyConstraint(['hotel_id'], ['hotels.id'], ),
            sa.ForeignKeyConstraint(['guest_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_bookings_id'), 'bookings', ['id'], unique=False)
        op.create_index(op.f('ix_bookings_hotel_id'), 'bookings', ['hotel_id'], unique=False)
        op.create_index(op.f('ix_bookings_guest_id'), 'bookings', ['guest_id'], unique=False)
        op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
        op.create_index('ix_bookings_hotel_dates', 'bookings', ['hotel_id', 'check_in_date', 'check_out_date'], unique=False)

        # PostgreSQL enforces the no-overlap rule for active bookings in the database as well
        if dialect_name == 'postgresql':
            op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
            op.execute(
                "ALTER TABLE bookings ADD CONSTRAINT ex_bookings_no_overlap "
                "EXCLUDE USING gist (hotel_id WITH =, daterange(check_in_date, check_out_date, '[)') WITH &&) "
                "WHERE (status IN ('pending', 'confirmed', 'completed'))"
            )

    if not _has_table(bind, 'payments'):
        op.create_table('payments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('booking_id', sa.Integer(), nullable=False),
            sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('payment_method', sa.String(length=100), server_default='demo', nullable=False),
            sa.Column('status', payment_status_enum, server_default='pending', nullable=False),
            sa.Column('transaction_id', sa.String(length=100), nullable=True),
            sa.Column('payment_date', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('booking_id')
        )
        op.create_index(op.f('ix_payments_id'), 'payments', ['id'], unique=False)

    if not _has_table(bind, 'reviews'):
        op.create_table('reviews',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('booking_id', sa.Integer(), nullable=False),
            sa.Column('hotel_id', sa.Integer(), nullable=False),
            sa.Column('guest_id', sa.Integer(), nullable=False),
            sa.Column('rating', sa.Integer(), nullable=False),
            sa.Column('comment', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
            sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ),
            sa.ForeignKeyConstraint(['hotel_id'], ['hotels.id'], ),
            sa.ForeignKeyConstraint(['guest_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('booking_id')
        )
        op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
        op.create_index(op.f('ix_reviews_hotel_id'), 'reviews', ['hotel_id'], unique=False)

    if not _has_table(bind, 'famous_places'):
        op.create_table('famous_places',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('city', sa.String(length=120), nullable=False),
            sa.Column('country', sa.String(length=120), nullable=False),
            sa.Column('address', sa.String(length=300), nullable=True),
            sa.Column('category', sa.String(length=100), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.Column('primary_image_url', sa.String(length=500), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_famous_places_id'), 'famous_places', ['id'], unique=False)
        op.create_index(op.f('ix_famous_places_city'), 'famous_places', ['city'], unique=False)

    if not _has_table(bind, 'hotel_famous_places'):
        op.create_table('hotel_famous_places',
            sa.Column('hotel_id', sa.Integer(), nullable=False),
            sa.Column('place_id', sa.Integer(), nullable=False),
            sa.Column('distance_m', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('distance_m IS NULL OR distance_m >= 0', name='ck_hotel_famous_places_distance'),
            sa.ForeignKeyConstraint(['hotel_id'], ['hotels.id'], ),
            sa.ForeignKeyConstraint(['place_id'], ['famous_places.id'], ),
            sa.PrimaryKeyConstraint('hotel_id', 'place_id')
        )

    if not _has_table(bind, 'notifications'):
        op.create_table('notifications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('type', notification_type_enum, nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('message', sa.Text(), nullable=True),
            sa.Column('related_booking_id', sa.Integer(), nullable=True),
            sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('emailed_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['related_booking_id'], ['bookings.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
        op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
        op.create_index(op.f('ix_notifications_related_booking_id'), 'notifications', ['related_booking_id'], unique=False)

    if not _has_table(bind, 'wishlists'):
        op.create_table('wishlists',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('guest_id', sa.Integer(), nullable=False),
            sa.Column('hotel_id', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['guest_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['hotel_id'], ['hotels.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('guest_id', 'hotel_id', name='uq_wishlists_guest_hotel')
        )
        op.create_index(op.f('ix_wishlists_id'), 'wishlists', ['id'], unique=False)
        op.create_index(op.f('ix_wishlists_guest_id'), 'wishlists', ['guest_id'], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    dialect_name = bind.dialect.name
    op.drop_table('wishlists')
    op.drop_table('notifications')
    op.drop_table('hotel_famous_places')
    op.drop_table('famous_places')
    op.drop_table('reviews')
    op.drop_table('payments')
    if dialect_name == 'postgresql':
        op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_no_overlap")
    op.drop_table('bookings')
    op.drop_table('hotels')
    op.drop_table('users')

    # Drop ENUM types for PostgreSQL
    if dialect_name == 'postgresql':
        sa.Enum(name='notification_type').drop(bind, checkfirst=True)
        sa.Enum(name='payment_status').drop(bind, checkfirst=True)
        sa.Enum(name='booking_status').drop(bind, checkfirst=True)
        sa.Enum(name='user_type').drop(bind, checkfirst=True)
