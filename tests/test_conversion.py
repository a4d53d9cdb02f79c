import pytest

from budgetwise.services.rates.conversion import ConversionResult
from budgetwise.services.rates.errors import UnsupportedCurrencyError


class TestRateConversionService:
    """Tests for base-normalised conversion and the rate contract."""

    def test_identity_has_rate_one_and_no_cache_access(
        self, conversion_service, source
    ):
        result = conversion_service.convert(42.5, "PKR", "pkr")
        assert result == ConversionResult(42.5, 1.0, "PKR", "PKR")
        assert source.calls == []

    def test_usd_to_pkr(self, conversion_service):
        result = conversion_service.convert(100, "USD", "PKR")
        assert result.converted_amount == pytest.approx(28350)
        assert result.rate == pytest.approx(283.5)
        assert (result.from_currency, result.to_currency) == ("USD", "PKR")

    def test_pkr_to_usd_returns_from_leg_rate(self, conversion_service):
        result = conversion_service.convert(28350, "PKR", "USD")
        assert result.converted_amount == pytest.approx(100)
        assert result.rate == pytest.approx(283.5)

    def test_same_rate_serves_both_directions(self, conversion_service):
        forward = conversion_service.convert(229.45, "USD", "PKR")
        back = conversion_service.convert(forward.converted_amount, "PKR", "USD")
        assert forward.rate == back.rate
        assert forward.converted_amount / forward.rate == pytest.approx(229.45)

    @pytest.mark.parametrize(
        "amount,x,y",
        [(100, "USD", "PKR"), (65000, "PKR", "USD"), (1234.56, "EUR", "JPY"), (0.01, "GBP", "PKR")],
    )
    def test_round_trip_recovers_amount(self, conversion_service, amount, x, y):
        there = conversion_service.convert(amount, x, y).converted_amount
        back = conversion_service.convert(there, y, x).converted_amount
        assert back == pytest.approx(amount, rel=1e-9)

    def test_cross_conversion_goes_through_base(self, conversion_service):
        result = conversion_service.convert(92, "EUR", "PKR")
        assert result.converted_amount == pytest.approx(100 * 283.5)
        assert result.rate == pytest.approx(283.5)

    def test_one_fetch_serves_both_legs(self, conversion_service, source):
        conversion_service.convert(10, "EUR", "PKR")
        conversion_service.convert(10, "PKR", "JPY")
        assert source.calls == ["USD"]

    def test_force_refresh_refetches(self, conversion_service, source):
        conversion_service.convert(10, "USD", "PKR")
        conversion_service.convert(10, "USD", "PKR", force_refresh=True)
        assert len(source.calls) == 2

    def test_precision_is_fifteen_places(self, conversion_service):
        result = conversion_service.convert(1, "USD", "EUR")
        assert result.converted_amount == round(result.converted_amount, 15)

    def test_unsupported_target_is_named(self, conversion_service):
        with pytest.raises(UnsupportedCurrencyError) as exc:
            conversion_service.convert(100, "USD", "ZZZ")
        assert exc.value.currency == "ZZZ"
        assert "ZZZ" in str(exc.value)

    def test_unsupported_source_is_named(self, conversion_service):
        with pytest.raises(UnsupportedCurrencyError) as exc:
            conversion_service.convert(100, "ZZZ", "USD")
        assert exc.value.currency == "ZZZ"

    def test_negative_amount_rejected(self, conversion_service):
        with pytest.raises(ValueError):
            conversion_service.convert(-1, "USD", "PKR")

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    def test_non_finite_amount_rejected(self, conversion_service, source, amount):
        with pytest.raises(ValueError):
            conversion_service.convert(amount, "USD", "PKR")
        assert source.calls == []

    def test_payload_uses_wire_names(self):
        payload = ConversionResult(28350.0, 283.5, "USD", "PKR").as_payload()
        assert payload == {
            "convertedAmount": 28350.0,
            "rate": 283.5,
            "from": "USD",
            "to": "PKR",
        }
