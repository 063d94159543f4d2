"""
Order intake validation: field rules, calendar rules and stock checks.
Today is Monday 2026-01-26, so the earliest shipping date is 2026-02-02.
"""
import pytest
from datetime import date

from cportal.exceptions import InsufficientStockError, OrderValidationError
from cportal.intake import OrderPayload, validate_order
from cportal.schemas import OrderStatus

from conftest import TODAY


def payload(**overrides):
    base = {
        "customer_id": 1,
        "customer": "CEAD BV",
        "ordered_by": "Bob",
        "quantity_kg": 500,
    }
    base.update(overrides)
    return {k: v for k, v in base.items() if v is not None}


@pytest.fixture
def validate(stock_entries, orders, config):
    def _validate(data):
        return validate_order(data, stock_entries, orders, TODAY, config)

    return _validate


class TestFieldRules:
    def test_quantity_not_multiple_of_20(self, validate):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(quantity_kg=250))
        assert exc_info.value.field == "quantity_kg"
        assert exc_info.value.message == "Quantity must be a multiple of 20 kg, got 250 kg"
        assert exc_info.value.code == "INVALID_FIELD"

    @pytest.mark.parametrize("quantity", [0, -40])
    def test_quantity_must_be_positive(self, validate, quantity):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(quantity_kg=quantity))
        assert exc_info.value.field == "quantity_kg"
        assert "greater than 0" in exc_info.value.message

    def test_quantity_must_be_numeric(self, validate):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(quantity_kg="a lot"))
        assert exc_info.value.field == "quantity_kg"

    def test_numeric_string_quantity_is_accepted(self, validate):
        order = validate(payload(quantity_kg="480"))
        assert order.quantity_kg == 480

    @pytest.mark.parametrize("missing", ["customer_id", "customer", "ordered_by", "quantity_kg"])
    def test_required_fields(self, validate, missing):
        data = payload()
        del data[missing]
        with pytest.raises(OrderValidationError) as exc_info:
            validate(data)
        assert exc_info.value.field == missing
        assert exc_info.value.message == f"Missing required field '{missing}'"

    def test_blank_customer_is_rejected(self, validate):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(customer="   "))
        assert exc_info.value.field == "customer"

    def test_unrecognized_date(self, validate):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(planned_shipping_date="31-02-2026"))
        assert exc_info.value.field == "planned_shipping_date"
        assert "Unrecognized date '31-02-2026'" in exc_info.value.message

    def test_step_comes_from_context(self):
        model = OrderPayload.model_validate(
            payload(quantity_kg=250), context={"quantity_step_kg": 50}
        )
        assert model.quantity_kg == 250


class TestWithoutShippingDate:
    def test_adopts_first_available_date(self, validate):
        order = validate(payload())
        assert order.planned_shipping_date == date(2026, 2, 2)
        assert order.status == OrderStatus.RESERVED
        assert order.timestamp is None
        assert order.id is None

    def test_larger_order_adopts_later_date(self, validate):
        order = validate(payload(quantity_kg=800))
        assert order.planned_shipping_date == date(2026, 3, 16)

    def test_insufficient_stock(self, validate):
        with pytest.raises(InsufficientStockError) as exc_info:
            validate(payload(quantity_kg=20000))
        assert exc_info.value.available_kg == 18560
        assert exc_info.value.requested_kg == 20000
        assert exc_info.value.code == "INSUFFICIENT_STOCK"


class TestWithShippingDate:
    def test_day_first_format_is_accepted(self, validate):
        order = validate(payload(planned_shipping_date="03-02-2026", comment=" AM Village "))
        assert order.planned_shipping_date == date(2026, 2, 3)
        assert order.comment == "AM Village"

    def test_before_minimum_order_date(self, validate):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(planned_shipping_date="2026-01-28"))
        assert exc_info.value.field == "planned_shipping_date"
        assert "2026-02-02" in exc_info.value.message

    def test_weekend(self, validate):
        with pytest.raises(OrderValidationError) as exc_info:
            validate(payload(planned_shipping_date="2026-02-07"))
        assert "weekend" in exc_info.value.message

    def test_exact_date_stock_check(self, validate):
        """On 2026-02-16 deliveries minus earlier orders leave 1260 kg."""
        order = validate(payload(quantity_kg=1260, planned_shipping_date="2026-02-16"))
        assert order.quantity_kg == 1260

        with pytest.raises(InsufficientStockError) as exc_info:
            validate(payload(quantity_kg=1300, planned_shipping_date="2026-02-16"))
        assert exc_info.value.available_kg == 1260

    def test_date_object_is_accepted(self, validate):
        order = validate(payload(planned_shipping_date=date(2026, 9, 2)))
        assert order.planned_shipping_date == date(2026, 9, 2)

    def test_over_committed_date_is_rejected(self, validate):
        """Mid-March the cumulative commitments exceed deliveries."""
        with pytest.raises(InsufficientStockError) as exc_info:
            validate(payload(quantity_kg=20, planned_shipping_date="2026-03-17"))
        assert exc_info.value.available_kg == 0
