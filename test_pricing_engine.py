"""Tests for the pricing engine entry point"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import TUESDAY, make_promotion
from pos_pricing.core.clock import Clock, ReferenceDate
from pos_pricing.core.exceptions import SaleValidationError, ZeroTotalError
from pos_pricing.core.models import Channel, DateRange, DiscountType, PaymentMethod
from pos_pricing.orchestrator import PricingEngine, compute_price
from pos_pricing.utils.audit_logger import PricingAuditLogger


class CountingClock(Clock):
    def __init__(self, moment):
        self.moment = moment
        self.calls = 0

    def now(self):
        self.calls += 1
        return ReferenceDate(self.moment)


def test_scenario_a_tuesday_fixed_price_pack(cuarto, tuesday_promo, tuesday_clock):
    result = compute_price(cuarto, [tuesday_promo], 5, 'local', tuesday_clock)

    assert result.base_total == 12500
    assert result.total == 2 * 4500 + 2500
    assert result.applied_promotion is tuesday_promo


def test_scenario_b_percentage_single_unit_packs(kilo, tuesday_clock):
    promo = make_promotion(presentation_id=kilo.id, min_quantity=1, discount_value=Decimal('10'))

    result = compute_price(kilo, [promo], 3, Channel.LOCAL, tuesday_clock)

    assert result.total == 21600
    assert result.base_total == 24000
    assert result.discount == 2400


def test_scenario_c_delivery_three_for_two(medio, delivery_pack_promo, tuesday_clock):
    result = compute_price(medio, [delivery_pack_promo], 3, 'pedidos_ya', tuesday_clock)

    assert result.base_total == 15600
    assert result.total == 10400
    assert result.effective_unit_price == 3467


def test_scenario_d_zero_quantity(cuarto, tuesday_promo, tuesday_clock):
    result = compute_price(cuarto, [tuesday_promo], 0, 'local', tuesday_clock)

    assert result.base_total == 0
    assert result.total == 0
    assert result.applied_promotion is None
    assert result.effective_unit_price == 0


def test_missing_presentation_yields_zero_result(catalog_promotions, tuesday_clock):
    result = compute_price(None, catalog_promotions, 3, 'local', tuesday_clock)

    assert result.total == 0
    assert result.base_total == 0
    assert result.applied_promotion is None


def test_no_eligible_promotion_charges_base_total(cuarto, tuesday_promo, wednesday_clock):
    result = compute_price(cuarto, [tuesday_promo], 5, 'local', wednesday_clock)

    assert result.applied_promotion is None
    assert result.total == result.base_total == 5 * 2500


def test_delivery_channel_uses_delivery_price(cuarto, wednesday_clock):
    result = compute_price(cuarto, [], 2, 'pedidos_ya', wednesday_clock)

    assert result.unit_price == 3000
    assert result.total == 6000


def test_clock_read_once_per_call(kilo, kilo_week_promo):
    clock = CountingClock(TUESDAY)
    engine = PricingEngine(clock=clock)

    engine.compute_price(kilo, [kilo_week_promo], 2, 'local')

    assert clock.calls == 1


def test_price_lines_share_one_clock_reading(kilo, cuarto, catalog_promotions):
    clock = CountingClock(TUESDAY)
    engine = PricingEngine(clock=clock)

    results = engine.price_lines([(kilo, 1, 'local'), (cuarto, 2, 'local')], catalog_promotions)

    assert clock.calls == 1
    assert [r.total for r in results] == [7200, 4500]
    assert results[0].reference_date == results[1].reference_date


def test_date_window_promotion_wins_over_standing_rule(kilo, kilo_week_promo, tuesday_clock):
    standing = make_promotion(id=99, presentation_id=kilo.id, discount_type=DiscountType.AMOUNT_OFF,
                              discount_value=Decimal('3000'))

    result = compute_price(kilo, [standing, kilo_week_promo], 1, 'local', tuesday_clock)

    assert result.applied_promotion is kilo_week_promo
    assert result.total == 7200


def test_catalog_order_when_date_preference_disabled(kilo, kilo_week_promo, tuesday_clock):
    standing = make_promotion(id=99, presentation_id=kilo.id, discount_type=DiscountType.AMOUNT_OFF,
                              discount_value=Decimal('3000'))
    engine = PricingEngine(config={'prefer_date_window': False}, clock=tuesday_clock)

    result = engine.compute_price(kilo, [standing, kilo_week_promo], 1, 'local')

    assert result.applied_promotion is standing
    assert result.total == 5000


def test_total_never_negative_with_malformed_promotion(kilo, tuesday_clock):
    promo = make_promotion(presentation_id=kilo.id, discount_type=DiscountType.FIXED_PRICE,
                           discount_value=Decimal('-500'))

    result = compute_price(kilo, [promo], 2, 'local', tuesday_clock)

    assert result.total == 0


def test_register_sale_builds_record(medio, delivery_pack_promo, tuesday_clock):
    engine = PricingEngine(clock=tuesday_clock)

    record, result = engine.register_sale(medio, [delivery_pack_promo], 3, 'pedidos_ya', 'mercado_pago')

    assert record.type == Channel.PEDIDOS_YA
    assert record.presentation_name == '1/2 Kilo'
    assert record.price_base == 3467
    assert record.total == 10400
    assert record.quantity == 3
    assert record.date == TUESDAY
    assert record.payment_method == PaymentMethod.MERCADO_PAGO
    assert record.promotion_id == delivery_pack_promo.id
    assert result.applied_promotion is delivery_pack_promo


def test_register_sale_defaults_to_cash(cuarto, tuesday_clock):
    record, _ = PricingEngine(clock=tuesday_clock).register_sale(cuarto, [], 1, 'local')

    assert record.payment_method == PaymentMethod.CASH
    assert record.to_row()['payment_method'] == 'efectivo'


def test_register_sale_rejects_zero_total(kilo, tuesday_clock):
    free = make_promotion(presentation_id=kilo.id, discount_value=Decimal('100'))
    engine = PricingEngine(clock=tuesday_clock)

    with pytest.raises(ZeroTotalError):
        engine.register_sale(kilo, [free], 1, 'local')


def test_register_sale_requires_presentation(tuesday_clock):
    with pytest.raises(SaleValidationError):
        PricingEngine(clock=tuesday_clock).register_sale(None, [], 1, 'local')


def test_audit_trail_records_applied_promotion(tmp_path, cuarto, tuesday_promo, tuesday_clock):
    engine = PricingEngine(clock=tuesday_clock)
    audit_logger = PricingAuditLogger(str(tmp_path / 'logs'))

    result = engine.compute_price(cuarto, [tuesday_promo], 4, 'local')
    log_id = audit_logger.log_pricing_decision(engine.generate_audit_log(result, cuarto))

    entries = audit_logger.query_logs(product_id=cuarto.id, start_date=date(2024, 1, 2), end_date=date(2024, 1, 2))
    assert len(entries) == 1
    assert entries[0]['log_id'] == log_id
    assert entries[0]['promotion']['discount_type'] == 'fixed_price'
    assert entries[0]['total'] == 9000

    report = audit_logger.generate_daily_report(date(2024, 1, 2))
    assert report['discounted_lines'] == 1
    assert report['total_discount'] == 1000
    assert report['by_promotion']['Martes de 1/4']['lines'] == 1


def test_audit_trail_skips_csv_without_promotion(tmp_path, cuarto, wednesday_clock):
    engine = PricingEngine(clock=wednesday_clock)
    audit_logger = PricingAuditLogger(str(tmp_path / 'logs'))

    result = engine.compute_price(cuarto, [], 1, 'local')
    audit_logger.log_pricing_decision(engine.generate_audit_log(result, cuarto))

    assert audit_logger.generate_daily_report(date(2024, 1, 3))['discounted_lines'] == 0
    assert len(audit_logger.query_logs(start_date=date(2024, 1, 3), end_date=date(2024, 1, 3))) == 1


def test_invalid_pack_size_does_not_hide_valid_promotion(kilo, tuesday_clock):
    broken = make_promotion(id=20, presentation_id=kilo.id, min_quantity=0,
                            time_scope=DateRange(start=date(2024, 1, 1)))
    valid = make_promotion(id=21, presentation_id=kilo.id, min_quantity=1, discount_value=Decimal('10'))

    result = compute_price(kilo, [broken, valid], 2, 'local', tuesday_clock)

    assert result.applied_promotion is valid
    assert result.total == 14400


@pytest.mark.parametrize("channel", [Channel.ALL, 'all', 'rappi', None])
def test_unsellable_channel_yields_zero_result(kilo, catalog_promotions, tuesday_clock, channel):
    result = compute_price(kilo, catalog_promotions, 2, channel, tuesday_clock)

    assert result.total == 0
    assert result.base_total == 0
    assert result.applied_promotion is None


@pytest.mark.parametrize("channel", [Channel.ALL, 'rappi'])
def test_register_sale_rejects_unsellable_channel(cuarto, tuesday_clock, channel):
    with pytest.raises(SaleValidationError):
        PricingEngine(clock=tuesday_clock).register_sale(cuarto, [], 1, channel)


def test_register_sale_rejects_unknown_payment_method(cuarto, tuesday_clock):
    with pytest.raises(SaleValidationError) as exc_info:
        PricingEngine(clock=tuesday_clock).register_sale(cuarto, [], 1, 'local', 'cheque')

    assert 'cheque' in str(exc_info.value)
