from .carbon_store import CarbonStore, has_carbon_data_stored_in_amee, ranges_overlap
from .category import AmeeCategory, field_names_for_type
from .client import AmeeConnection
from .config import CarbonStoreConfig, Settings
from .errors import (
    AmeeLayerError,
    CategoryNotImplementedError,
    ExternalApiError,
    InvalidUnitError,
    ValidationError,
)
from .models import CarbonRecordMixin, Project
from .schemas import DeleteOutcome, DeleteResult, ProfileItem
from .units import Unit
