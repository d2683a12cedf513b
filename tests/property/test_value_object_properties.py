"""
Property-Based Tests for Value Object Invariants

Coordinates stay inside the Kenyan bounding box, names and phone numbers
normalize consistently, and identity numbers accept exactly the valid
formats.
"""
import pytest
from hypothesis import given, settings, strategies as st

from core.errors import ValueObjectValidationError
from domain.value_objects.geographic import GPSCoordinates
from domain.value_objects.identity import NationalId
from domain.value_objects.personal import ContactInfo, KenyanName, normalize_phone
from tests.property.strategies import (
    coordinates_strategy,
    invalid_name_strategy,
    kenyan_phone_strategy,
    latitude_strategy,
    longitude_strategy,
    name_part_strategy,
    national_id_strategy,
)


class TestGPSBounds:
    """Bounding box invariants for GPSCoordinates."""

    @given(latitude_strategy(), longitude_strategy())
    @settings(max_examples=200)
    def test_in_bounds_constructs(self, lat, lon):
        point = GPSCoordinates(lat, lon)
        lat_min, lat_max = GPSCoordinates.LATITUDE_BOUNDS
        assert lat_min <= point.latitude <= lat_max

    @given(latitude_strategy(valid_only=False), longitude_strategy())
    def test_out_of_bounds_latitude_names_axis(self, lat, lon):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            GPSCoordinates(lat, lon)
        assert exc_info.value.field_name == "latitude"
        assert exc_info.value.details["violated_bound"] in ("min", "max")

    @given(latitude_strategy(), longitude_strategy(valid_only=False))
    def test_out_of_bounds_longitude_names_axis(self, lat, lon):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            GPSCoordinates(lat, lon)
        assert exc_info.value.field_name == "longitude"

    @given(coordinates_strategy(), coordinates_strategy())
    @settings(max_examples=100)
    def test_distance_is_symmetric(self, a, b):
        assert a.distance_to(b) == pytest.approx(b.distance_to(a), abs=1e-6)
        assert a.distance_to(a) == pytest.approx(0.0, abs=1e-6)


class TestNameProperties:

    @given(name_part_strategy(), name_part_strategy())
    def test_valid_names_construct(self, first, last):
        name = KenyanName(first_name=first, last_name=last)
        assert name.full_name == f"{first} {last}"

    @given(invalid_name_strategy())
    def test_digits_and_symbols_rejected(self, bad):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            KenyanName(first_name=bad, last_name="Kamau")
        assert exc_info.value.field_name == "first_name"

    @given(name_part_strategy(), st.integers(min_value=1, max_value=3))
    def test_whitespace_collapsed(self, first, pad):
        name = KenyanName(first_name=" " * pad + first + " " * pad, last_name="Kamau")
        assert name.first_name == first


class TestPhoneProperties:

    @given(kenyan_phone_strategy())
    def test_all_forms_normalize_to_e164(self, pair):
        raw, expected = pair
        assert normalize_phone(raw) == expected
        assert ContactInfo(phone_number=raw).phone_number == expected

    @given(kenyan_phone_strategy())
    def test_normalization_is_idempotent(self, pair):
        raw, expected = pair
        assert normalize_phone(normalize_phone(raw)) == expected


class TestNationalIdProperties:

    @given(national_id_strategy())
    def test_valid_numbers(self, number):
        assert NationalId(number).number == number

    @given(national_id_strategy(valid_only=False))
    def test_invalid_numbers(self, number):
        with pytest.raises(ValueObjectValidationError):
            NationalId(number)
