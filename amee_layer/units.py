# amee_layer/units.py
# Units understood by the AMEE API, keyed by our own unit key.
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

NAMES = {
    "km": "km",
    "miles": "miles",
    "kg": "kg",
    "tonnes": "tonnes",
    "kwh": "kWh",
    "litres": "litres",
    "uk_gallons": "UK Gallons",
}

AMEE_API_UNITS = {
    "km": "km",
    "miles": "mi",
    "kg": "kg",
    "tonnes": "t",
    "kwh": "kWh",
    "litres": "L",
    "uk_gallons": "gal_uk",
}


class Unit(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str

    @field_validator("key")
    @classmethod
    def _known_key(cls, value):
        if value not in NAMES:
            raise ValueError(f"Unknown unit '{value}'")
        return value

    @property
    def name(self) -> str:
        """Human readable form of the unit"""
        return NAMES[self.key]

    @property
    def amee_api_unit(self) -> str:
        """The string the AMEE API uses for the unit"""
        return AMEE_API_UNITS[self.key]

    @classmethod
    def get(cls, key: str) -> "Unit":
        if key not in NAMES:
            raise KeyError(key)
        return cls(key=key)

    @classmethod
    def from_amee_unit(cls, amee_unit: str) -> Optional["Unit"]:
        """Reverse lookup, eg "t" gives tonnes. None when the AMEE code is unknown."""
        for key, value in AMEE_API_UNITS.items():
            if value == amee_unit:
                return cls(key=key)
        return None

    @classmethod
    def all(cls) -> List["Unit"]:
        return [cls(key=key) for key in NAMES]

    @classmethod
    def km(cls):
        return cls(key="km")

    @classmethod
    def miles(cls):
        return cls(key="miles")

    @classmethod
    def kg(cls):
        return cls(key="kg")

    @classmethod
    def tonnes(cls):
        return cls(key="tonnes")

    @classmethod
    def kwh(cls):
        return cls(key="kwh")

    @classmethod
    def litres(cls):
        return cls(key="litres")

    @classmethod
    def uk_gallons(cls):
        return cls(key="uk_gallons")
