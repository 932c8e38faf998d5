# amee_layer/config.py
import os
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict

# relative to the working directory, the file is only created by init_db
DEFAULT_DATABASE_URL = "sqlite:///data/amee_layer.db"


class Settings(BaseModel):
    amee_server: str = "https://live.amee.com"
    amee_username: Optional[str] = None
    amee_password: Optional[str] = None
    amee_timeout: float = 30.0
    database_url: str = DEFAULT_DATABASE_URL

    @classmethod
    def from_env(cls):
        values = {
            "amee_server": os.environ.get("AMEE_SERVER"),
            "amee_username": os.environ.get("AMEE_USERNAME"),
            "amee_password": os.environ.get("AMEE_PASSWORD"),
            "amee_timeout": os.environ.get("AMEE_TIMEOUT"),
            "database_url": os.environ.get("DATABASE_URL"),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})


class CarbonStoreConfig(BaseModel):
    """Per-model options, built once and handed to the CarbonStore."""

    model_config = ConfigDict(frozen=True)

    has_date_range: bool = False
    type_amount_repeats: bool = False
    nameless: bool = False
    singular_types: bool = False
    # relation giving the AMEE profile the record is stored in
    scope_relation: str = "project"
    scope_key: str = "project_id"
    singular_type_attribute: Optional[str] = None

    def singular_type_attribute_for(self, model) -> str:
        if self.singular_type_attribute:
            return self.singular_type_attribute
        snake = re.sub(r"(?<!^)(?=[A-Z])", "_", model.__name__).lower()
        return f"{snake}_type"
