# amee_layer/models.py
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import declared_attr, relationship

from .database import Base
from .errors import CategoryNotImplementedError


class Project(Base):
    """Owns carbon records and the AMEE profile they are stored in."""

    __tablename__ = "projects"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(250), nullable=False)
    profile_uid = Column(String(32), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def profile_path(self):
        return f"/profiles/{self.profile_uid}"


class CarbonRecordMixin:
    """
    Columns and overridable hooks for a model whose carbon data is stored in
    AMEE. Concrete models must provide ``amee_category``; the lifecycle itself
    is attached by ``has_carbon_data_stored_in_amee``.

    ``amount`` is the distance/weight/... of the item (AMEE calls it the value),
    ``carbon_output_cache`` is the total carbon AMEE computed for it.
    """

    name = Column(String(250))
    amount = Column(Float)
    units = Column(String(32))
    amee_profile_item_id = Column(String(32))
    carbon_output_cache = Column(Float)
    repetitions = Column(Integer)
    start_date = Column(Date)
    end_date = Column(Date)

    @declared_attr
    def project_id(cls):
        return Column(Integer, ForeignKey("projects.id"), nullable=False)

    @declared_attr
    def project(cls):
        return relationship("Project")

    @property
    def amee_category(self):
        raise CategoryNotImplementedError(type(self).__name__)

    def additional_options(self):
        """Override to pass extra values to AMEE on create"""
        return None

    def amount_field(self, amee_unit):
        """Override if the AMEE field can't be inferred from the units"""
        return self.amee_category.resolve_field_name(amee_unit)

    def covers_date(self, date):
        # only meaningful for models with a date range
        return self.start_date <= date < self.end_date
