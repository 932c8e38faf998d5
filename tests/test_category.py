"""Tests for AmeeCategory field and unit mapping."""
from urllib.parse import parse_qs

import pytest

from amee_layer.category import CATEGORY_TYPES, FIELD_UNITS, AmeeCategory, field_names_for_type


class TestFieldNames:
    @pytest.mark.parametrize("category_type", list(CATEGORY_TYPES))
    def test_every_type_has_fields_with_units(self, category_type):
        fields = field_names_for_type(category_type)
        assert fields
        assert all(FIELD_UNITS[f] for f in fields)
        assert field_names_for_type(category_type) == fields

    def test_volumable_energy_order(self):
        assert field_names_for_type("volumable_energy") == ["volumePerTime", "energyConsumption"]

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            field_names_for_type("speed")
        with pytest.raises(ValueError):
            AmeeCategory("Fast", "speed", "/transport/fast")


class TestResolveFieldName:
    def test_resolves_field_for_unit(self):
        category = AmeeCategory("Heating", "volumable_energy", "/home/heating/fuel")
        assert category.resolve_field_name("L") == "volumePerTime"
        assert category.resolve_field_name("kWh") == "energyConsumption"

    def test_unknown_unit(self):
        category = AmeeCategory("Car", "distance", "/transport/car/generic")
        assert category.resolve_field_name("kg") is None
        assert category.resolve_field_name("parsec") is None

    def test_first_declared_field_wins(self):
        category = AmeeCategory("Bus", "journey_distance", "/transport/bus/generic/defra")
        assert category.resolve_field_name("mi") == "distancePerJourney"


class TestUnitOptions:
    def test_standard_units(self):
        category = AmeeCategory("Freight", "weight", "/transport/freight")
        assert category.unit_options() == [("kg", "kg"), ("tonnes", "t")]

    def test_alternate_units_listed_last(self):
        category = AmeeCategory(
            "Waste", "weight", "/home/waste", unit_conversions={"kg": {"m3": 2.5, "abc": 0.3}}
        )
        assert category.unit_options() == [("kg", "kg"), ("tonnes", "t"), ("m3", "m3"), ("abc", "abc")]

    def test_volumable_energy_units(self):
        category = AmeeCategory("Heating", "volumable_energy", "/home/heating/fuel")
        assert category.unit_options() == [("litres", "L"), ("kWh", "kWh")]


class TestAlternativeUnits:
    def setup_method(self):
        self.category = AmeeCategory(
            "Waste", "weight", "/home/waste", unit_conversions={"kg": {"m3": 2.5}, "tonnes": {"skip": 0.8}}
        )

    def test_lookups(self):
        assert self.category.is_alternative_unit("m3")
        assert self.category.converts_to("m3") == "kg"
        assert self.category.converts_to("skip") == "t"
        assert self.category.conversion_factor("m3") == 2.5
        assert self.category.conversion_factor("skip") == 0.8

    def test_standard_unit_is_not_alternative(self):
        assert not self.category.is_alternative_unit("kg")
        assert self.category.converts_to("kg") is None
        assert self.category.conversion_factor("kg") is None

    def test_no_conversions(self):
        category = AmeeCategory("Car", "distance", "/transport/car/generic")
        assert not category.has_alternative_units()
        assert not category.is_alternative_unit("m3")
        assert category.conversion_factor("m3") is None

    def test_target_must_belong_to_type(self):
        with pytest.raises(ValueError):
            AmeeCategory("Waste", "weight", "/home/waste", unit_conversions={"kwh": {"m3": 2.5}})


class TestDrillDownPath:
    def test_path_and_options(self):
        category = AmeeCategory("Car", "distance", "/transport/car/generic/defra/bysize",
                                fuel="average", size="large")
        path, _, query = category.drill_down_path().partition("?")
        assert path == "/data/transport/car/generic/defra/bysize/drill"
        assert parse_qs(query) == {"fuel": ["average"], "size": ["large"]}

    def test_cache_key_has_no_punctuation(self):
        category = AmeeCategory("Car", "distance", "/transport/car", fuel="average")
        key = category.drill_down_cache_key()
        assert key.startswith("amee_drilldown_")
        assert "/" not in key and "?" not in key and "=" not in key
