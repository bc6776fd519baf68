"""Shared fixtures for the pricing engine tests."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from pos_pricing.core.clock import FixedClock
from pos_pricing.core.models import (
    Always, Channel, DateRange, DiscountType, Presentation, Promotion, Weekdays
)
from pos_pricing.storage.catalog import SQLiteCatalog

# 2024-01-02 is a Tuesday, 2024-01-03 a Wednesday
TUESDAY = datetime(2024, 1, 2, 15, 30)
WEDNESDAY = datetime(2024, 1, 3, 11, 0)


def make_promotion(**overrides) -> Promotion:
    """Promotion with sensible defaults for a single test"""
    values = {
        'id': 1,
        'name': 'Test promo',
        'presentation_id': 1,
        'min_quantity': 1,
        'discount_type': DiscountType.PERCENTAGE,
        'discount_value': Decimal('10'),
        'time_scope': Always(),
        'channel': Channel.ALL,
        'is_active': True,
    }
    values.update(overrides)
    return Promotion(**values)


@pytest.fixture
def kilo():
    return Presentation(id=1, name='1 Kilo', price_local=8000, price_delivery=9500)


@pytest.fixture
def medio():
    return Presentation(id=2, name='1/2 Kilo', price_local=4500, price_delivery=5200)


@pytest.fixture
def cuarto():
    return Presentation(id=3, name='1/4 Kilo', price_local=2500, price_delivery=3000)


@pytest.fixture
def tuesday_clock():
    return FixedClock(TUESDAY)


@pytest.fixture
def wednesday_clock():
    return FixedClock(WEDNESDAY)


@pytest.fixture
def tuesday_promo():
    """Two 1/4 Kilo for 4500 on Tuesdays, in store only"""
    return make_promotion(
        id=10, name='Martes de 1/4', presentation_id=3, min_quantity=2,
        discount_type=DiscountType.FIXED_PRICE, discount_value=Decimal('4500'),
        time_scope=Weekdays(frozenset({2})), channel=Channel.LOCAL,
    )


@pytest.fixture
def kilo_week_promo():
    """10% off the kilo during the first week of January"""
    return make_promotion(
        id=11, name='Semana del Kilo', presentation_id=1, min_quantity=1,
        discount_type=DiscountType.PERCENTAGE, discount_value=Decimal('10'),
        time_scope=DateRange(date(2024, 1, 1), date(2024, 1, 7)), channel=Channel.ALL,
    )


@pytest.fixture
def delivery_pack_promo():
    """3x2 on the 1/2 Kilo for delivery"""
    return make_promotion(
        id=12, name='Pack Delivery 3x2', presentation_id=2, min_quantity=3,
        discount_type=DiscountType.AMOUNT_OFF, discount_value=Decimal('5200'),
        channel=Channel.PEDIDOS_YA,
    )


@pytest.fixture
def catalog_promotions(tuesday_promo, kilo_week_promo, delivery_pack_promo):
    return [tuesday_promo, kilo_week_promo, delivery_pack_promo]


@pytest.fixture
def catalog(tmp_path):
    """SQLite catalog seeded with three presentations and three promotions"""
    db = SQLiteCatalog(tmp_path / 'pos.db')

    conn = db._connect()
    conn.executemany(
        "INSERT INTO presentations (id, name, price_local, price_delivery) VALUES (?, ?, ?, ?)",
        [(1, '1 Kilo', 8000, 9500), (2, '1/2 Kilo', 4500, 5200), (3, '1/4 Kilo', 2500, 3000)]
    )
    conn.executemany(
        """INSERT INTO promotions (id, name, presentation_id, min_quantity, discount_type,
               discount_value, active_days, start_date, end_date, channel, is_active)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        [
            (1, 'Martes de 1/4', 3, 2, 'fixed_price', 4500, '2', None, None, 'local', 1),
            (2, 'Semana del Kilo', 1, 1, 'percentage', 10, '', '2024-01-01', '2024-01-07', 'all', 1),
            (3, 'Pack Delivery 3x2', 2, 3, 'amount_off', 5200, '', None, None, 'pedidos_ya', 1),
        ]
    )
    conn.commit()
    conn.close()

    return db
