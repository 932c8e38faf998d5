# amee_layer/category.py
"""
The AMEE category a carbon record is stored against.

A model modelling car trips has a single AmeeCategory for the chosen car
category in AMEE; a more generic Journey model keeps one per journey type
(car, bus, van...) and returns the right one from its ``amee_category``
property.

Category types and the AMEE field each one stores its amount in:
  distance          -> distance            (km, miles)
  journey_distance  -> distancePerJourney  (km, miles)
  weight            -> mass                (kg, tonnes)
  energy            -> energyConsumption   (kWh)
  volumable_energy  -> volumePerTime (litres) or energyConsumption (kWh)

The data item path must support the field for the chosen type, eg
/transport/bus/generic/defra works with journey_distance but
/transport/car/generic/defra/bysize only has a distance field.

Extra units can be offered through ``unit_conversions``:
    {"kg": {"m3": 2.5, "abc": 0.3}}
makes m3 and abc available, stored in AMEE as kg after multiplying by the
factor. The target keys must be standard units of the category type.
"""
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlencode

from .units import Unit

DRILLDOWN_CACHE_PREFIX = "amee_drilldown"

CATEGORY_TYPES = {
    "distance": ["distance"],
    "journey_distance": ["distancePerJourney"],
    "weight": ["mass"],
    "energy": ["energyConsumption"],
    "volumable_energy": ["volumePerTime", "energyConsumption"],
}

FIELD_UNITS = {
    "distance": [Unit.km(), Unit.miles()],
    "distancePerJourney": [Unit.km(), Unit.miles()],
    "mass": [Unit.kg(), Unit.tonnes()],
    "energyConsumption": [Unit.kwh()],
    "volumePerTime": [Unit.litres()],
}


def field_names_for_type(category_type: str) -> List[str]:
    try:
        return list(CATEGORY_TYPES[category_type])
    except KeyError:
        raise ValueError(f"Unknown category type '{category_type}'") from None


class AmeeCategory:
    """
    name: human readable name, only used for display
    category_type: one of CATEGORY_TYPES
    path: AMEE data category path, eg "/transport/car/generic/defra/bysize"
    unit_conversions: optional {target_unit_key: {alternate_unit: factor}}
    path_options: drill down choices making the path refer to one data item,
        eg fuel="average", size="average"
    """

    def __init__(
        self,
        name: str,
        category_type: str,
        path: str,
        unit_conversions: Optional[Dict[str, Dict[str, float]]] = None,
        **path_options,
    ):
        self.name = name
        self.category_type = category_type
        self.path = path
        self.path_options = path_options
        self._field_names = field_names_for_type(category_type)
        self._conversions = {}
        for target, alternates in (unit_conversions or {}).items():
            if target not in {u.key for u in self.category_units}:
                raise ValueError(
                    f"Cannot convert to '{target}': not a unit of category type '{category_type}'"
                )
            self._conversions[target] = {str(alt): float(f) for alt, f in alternates.items()}

    def __repr__(self):
        return f"AmeeCategory(name='{self.name}', type='{self.category_type}', path='{self.path}')"

    @property
    def field_names(self) -> List[str]:
        return list(self._field_names)

    @property
    def category_units(self) -> List[Unit]:
        return [unit for field in self._field_names for unit in FIELD_UNITS[field]]

    def drill_down_path(self) -> str:
        return f"/data{self.path}/drill?{urlencode(self.path_options)}"

    def drill_down_cache_key(self) -> str:
        stripped = re.sub(r"[^\w]", "", self.drill_down_path())
        return f"{DRILLDOWN_CACHE_PREFIX}_{stripped}"

    def unit_options(self) -> List[Tuple[str, str]]:
        """(name, AMEE unit) pairs for a unit select box, alternate units last.

        For the weight type this gives [("kg", "kg"), ("tonnes", "t")].
        """
        options = [(unit.name, unit.amee_api_unit) for unit in self.category_units]
        options += [(alt, alt) for alt in self._alternative_factors()]
        return options

    def resolve_field_name(self, amee_unit: str) -> Optional[str]:
        """The first field (declaration order) accepting the AMEE unit"""
        for field in self._field_names:
            if amee_unit in [unit.amee_api_unit for unit in FIELD_UNITS[field]]:
                return field
        return None

    def has_alternative_units(self) -> bool:
        return bool(self._conversions)

    def is_alternative_unit(self, unit) -> bool:
        return unit is not None and str(unit) in self._alternative_factors()

    def converts_to(self, unit) -> Optional[str]:
        """AMEE unit an alternate unit is stored as, None if it isn't an alternate"""
        for target, alternates in self._conversions.items():
            if str(unit) in alternates:
                return Unit.get(target).amee_api_unit
        return None

    def conversion_factor(self, unit) -> Optional[float]:
        return self._alternative_factors().get(str(unit))

    def _alternative_factors(self) -> Dict[str, float]:
        factors = {}
        for alternates in self._conversions.values():
            factors.update(alternates)
        return factors
