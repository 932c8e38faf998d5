# amee_layer/carbon_store.py
"""
Lifecycle of carbon records stored in AMEE.

A CarbonStore is built once per model from a CarbonStoreConfig and hooks the
model's SQLAlchemy mapper events:

    before_insert  validate, create the AMEE profile item, cache its total
    before_update  re-submit to AMEE when name/units/amount/repetitions changed
    after_delete   remove the AMEE profile item; failures are logged, not raised

    store = has_carbon_data_stored_in_amee(Journey, connection, has_date_range=True)
    store.update_carbon_caches(db)

Validation and the AMEE calls are not transactional: a create that succeeds in
AMEE followed by a failed commit leaves an orphan profile item.
"""
import logging
import numbers
import re
import time

from sqlalchemy import event, inspect, select
from sqlalchemy.orm import object_session

from .config import CarbonStoreConfig
from .errors import AmeeLayerError, CategoryNotImplementedError, InvalidUnitError, ValidationError
from .logging_utils import get_logger, log_operation
from .schemas import DeleteOutcome, DeleteResult

logger = get_logger(__name__)

TRACKED_FIELDS = ("name", "units", "amount", "repetitions")
DATE_FIELDS = ("start_date", "end_date")
NAME_FORMAT = re.compile(r"[\w -]+")
NAME_MAX_LENGTH = 250

# models with lifecycle hooks attached, each may only have one store
_installed_models = set()


def ranges_overlap(start, end, other_start, other_end):
    """Ranges overlap unless one is entirely before the other; touching ends are allowed."""
    before = start < other_start and end <= other_start
    after = start >= other_end and end > other_end
    return not (before or after)


def is_numeric(value):
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, numbers.Number):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def is_integer(value):
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return isinstance(value, str) and value.strip().lstrip("+-").isdigit()


def log_delete_result(result: DeleteResult):
    if result.confirmed:
        log_operation(logger, "delete_from_amee", "success", path=result.profile_item_path)
    else:
        log_operation(
            logger,
            "delete_from_amee",
            result.outcome.value,
            level=logging.ERROR,
            path=result.profile_item_path,
            error=result.error,
        )


class CarbonStore:
    def __init__(self, model, config: CarbonStoreConfig = None, connection=None, delete_sink=None):
        self.model = model
        self.config = config or CarbonStoreConfig()
        self.connection = connection
        self.delete_sink = delete_sink or log_delete_result

    def install(self):
        if self.model in _installed_models:
            raise AmeeLayerError(f"{self.model.__name__} already has a carbon store installed")
        _installed_models.add(self.model)
        event.listen(self.model, "before_insert", self._before_insert)
        event.listen(self.model, "before_update", self._before_update)
        event.listen(self.model, "after_delete", self._after_delete)
        return self

    # Mapper events

    def _before_insert(self, mapper, db_connection, target):
        self.validate(target, db_connection, creating=True)
        self.add_to_amee(target)

    def _before_update(self, mapper, db_connection, target):
        tracked = self.changed(target, TRACKED_FIELDS)
        if not tracked and not self.changed(target, DATE_FIELDS):
            return
        self.validate(target, db_connection, creating=False)
        if tracked:
            self.update_amee(target)

    def _after_delete(self, mapper, db_connection, target):
        self.delete_from_amee(target)

    @staticmethod
    def changed(record, fields):
        state = inspect(record)
        return any(state.attrs[field].history.has_changes() for field in fields)

    # Validation

    def validate(self, record, bind, creating=True):
        """Raise ValidationError (InvalidUnitError for bad units) listing every problem.

        bind is anything that can execute a select: a Connection or a Session.
        """
        errors = []
        if not is_numeric(record.amount):
            errors.append("amount is not a number")
        if self.config.type_amount_repeats and not is_integer(record.repetitions):
            errors.append("repetitions must be an integer")
        if self.scope(record) is None:
            errors.append(f"{self.config.scope_relation} can't be blank")
        if not self.config.nameless:
            errors.extend(self._name_errors(record, bind))
        if creating and self.config.singular_types:
            errors.extend(self._singular_type_errors(record, bind))
        if creating and self.amount_field(record) is None:
            errors.append("units are not valid")
            raise InvalidUnitError(record.units, errors)
        if errors:
            raise ValidationError(errors)

    def _name_errors(self, record, bind):
        name = record.name
        if not name:
            return ["name can't be blank"]
        errors = []
        if len(name) > NAME_MAX_LENGTH:
            errors.append(f"name is too long (maximum is {NAME_MAX_LENGTH} characters)")
        if not NAME_FORMAT.fullmatch(name):
            errors.append("name must be letters, numbers, spaces or underscores only")
        table = self.model.__table__

        if self.config.has_date_range:
            if record.start_date is None:
                errors.append("start date can't be blank")
            if record.end_date is None:
                errors.append("end date can't be blank")
            if record.start_date is None or record.end_date is None:
                return errors
            rows = bind.execute(
                select(table.c.id, table.c.start_date, table.c.end_date).where(table.c.name == name)
            )
            for row in rows:
                if row.id == record.id:
                    continue
                if ranges_overlap(record.start_date, record.end_date, row.start_date, row.end_date):
                    errors.append("Entry already added covering dates within that range")
                    break
        else:
            query = select(table.c.id).where(
                table.c.name == name,
                table.c[self.config.scope_key] == self.scope_id(record),
            )
            if record.id is not None:
                query = query.where(table.c.id != record.id)
            if bind.execute(query).first() is not None:
                errors.append("name has already been taken")
        return errors

    def _singular_type_errors(self, record, bind):
        attribute = self.config.singular_type_attribute_for(self.model)
        table = self.model.__table__
        query = select(table.c.id).where(
            table.c[self.config.scope_key] == self.scope_id(record),
            table.c[attribute] == getattr(record, attribute),
        )
        if bind.execute(query).first() is not None:
            return [f"This {self.config.scope_relation} already has a {record.amee_category.name} entry"]
        return []

    # Values sent to AMEE

    def effective_amount(self, record):
        # an alternate unit conversion takes the place of repetition multiplying
        category = record.amee_category
        amount = float(record.amount)
        if category.is_alternative_unit(record.units):
            return amount * category.conversion_factor(record.units)
        if self.config.type_amount_repeats:
            return amount * int(record.repetitions)
        return amount

    def effective_unit(self, record):
        category = record.amee_category
        if category.is_alternative_unit(record.units):
            return category.converts_to(record.units)
        return record.units

    def amount_field(self, record):
        return record.amount_field(self.effective_unit(record))

    def record_name(self, record):
        if self.config.nameless:
            return f"{type(record).__name__}_{int(time.time())}"
        return record.name

    def amount_values(self, record):
        field = self.amount_field(record)
        if field is None:
            raise InvalidUnitError(record.units)
        return {
            "name": self.record_name(record),
            field: self.effective_amount(record),
            f"{field}Unit": self.effective_unit(record),
        }

    # Scope and paths

    def scope(self, record):
        scope = getattr(record, self.config.scope_relation, None)
        if scope is None:
            # pending records set by foreign key only are not lazy loaded during a flush
            scope_id = getattr(record, self.config.scope_key, None)
            session = object_session(record)
            if scope_id is not None and session is not None:
                owner = inspect(self.model).relationships[self.config.scope_relation].mapper.class_
                scope = session.get(owner, scope_id)
        return scope

    def scope_id(self, record):
        scope_id = getattr(record, self.config.scope_key, None)
        if scope_id is None:
            scope_id = getattr(self.scope(record), "id", None)
        return scope_id

    def connection_for(self, record):
        connection = getattr(self.scope(record), "amee_connection", None) or self.connection
        if connection is None:
            raise AmeeLayerError(f"No AMEE connection configured for {self.model.__name__}")
        return connection

    def profile_category_path(self, record):
        return f"{self.scope(record).profile_path}{record.amee_category.path}"

    def profile_item_path(self, record):
        return f"{self.profile_category_path(record)}/{record.amee_profile_item_id}"

    # AMEE calls

    def add_to_amee(self, record):
        values = self.amount_values(record)
        if self.config.has_date_range:
            values["startDate"] = record.start_date.isoformat()
            values["endDate"] = record.end_date.isoformat()
        extra = record.additional_options()
        if extra:
            values.update(extra)
        connection = self.connection_for(record)
        item = connection.create_profile_item(
            self.profile_category_path(record),
            connection.data_category_uid(record.amee_category),
            values,
        )
        record.amee_profile_item_id = item.uid
        record.carbon_output_cache = item.total_amount
        record._amee_profile_item_cache = item
        log_operation(logger, "add_to_amee", "success", profile_item_uid=item.uid,
                      total_amount=item.total_amount)
        return item

    def update_amee(self, record):
        item = self.connection_for(record).update_profile_item(
            self.profile_item_path(record), self.amount_values(record)
        )
        record.carbon_output_cache = item.total_amount
        record._amee_profile_item_cache = item
        log_operation(logger, "update_amee", "success", profile_item_uid=record.amee_profile_item_id,
                      total_amount=item.total_amount)
        return item

    def delete_from_amee(self, record) -> DeleteResult:
        path = None
        try:
            path = self.profile_item_path(record)
            self.connection_for(record).delete_profile_item(path)
        except CategoryNotImplementedError:
            raise
        except Exception as e:
            result = DeleteResult(
                outcome=DeleteOutcome.REMOTE_UNCONFIRMED,
                profile_item_path=path,
                error=f"Unable to remove '{path}' from AMEE: {e}",
            )
        else:
            result = DeleteResult(outcome=DeleteOutcome.DELETED, profile_item_path=path)
        self.delete_sink(result)
        return result

    def profile_item(self, record, reload=False):
        """The record's AMEE profile item, fetched once per instance"""
        cached = getattr(record, "_amee_profile_item_cache", None)
        if cached is None or reload:
            cached = self.connection_for(record).get_profile_item(self.profile_item_path(record))
            record._amee_profile_item_cache = cached
        return cached

    # AMEE periodically recalculates totals with improved methodology

    def update_carbon_output_cache(self, db, record):
        record.carbon_output_cache = self.profile_item(record, reload=True).total_amount
        db.add(record)
        db.commit()
        return record.carbon_output_cache

    def update_carbon_caches(self, db):
        records = db.query(self.model).all()
        for record in records:
            self.update_carbon_output_cache(db, record)
        log_operation(logger, "update_carbon_caches", "success", model=self.model.__name__,
                      updated=len(records))
        return len(records)


def has_carbon_data_stored_in_amee(model, connection=None, delete_sink=None, **options):
    config = CarbonStoreConfig(**options)
    return CarbonStore(model, config, connection, delete_sink).install()
