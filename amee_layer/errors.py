# amee_layer/errors.py
"""Exceptions raised by the AMEE layer.

AmeeLayerError
├── ValidationError
│   └── InvalidUnitError
└── ExternalApiError
CategoryNotImplementedError (NotImplementedError)
"""
from typing import List, Optional


class AmeeLayerError(Exception):
    pass


class ValidationError(AmeeLayerError):
    """Raised before any AMEE call when a record fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {'; '.join(self.errors)}")


class InvalidUnitError(ValidationError):
    def __init__(self, units, errors: Optional[List[str]] = None):
        self.units = units
        super().__init__(errors or [f"units '{units}' are not valid"])


class ExternalApiError(AmeeLayerError):
    """Raised when a call to the AMEE API fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        self.status_code = status_code
        self.path = path
        detail = message
        if status_code is not None:
            detail = f"{detail} (HTTP {status_code})"
        if path:
            detail = f"{detail} [{path}]"
        super().__init__(detail)


class CategoryNotImplementedError(NotImplementedError):
    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"{model_name} must implement amee_category")
