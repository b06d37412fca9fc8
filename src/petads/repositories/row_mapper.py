"""
Convert row maps (column name -> value) into typed records.

The target shape is a pydantic model; its `model_fields` give the ordered list
of named, typed fields. Mapping is total: it returns a fully built record or
raises a single MappingError, never a partially populated one.
"""
import logging
import types
from datetime import datetime
from typing import Any, Iterable, Mapping, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from petads.exceptions.base import MappingError

logger = logging.getLogger(__name__)

RecordType = TypeVar("RecordType", bound=BaseModel)


def is_temporal(annotation: Any) -> bool:
    """True for `datetime` and optional `datetime` annotations."""
    if annotation is datetime:
        return True
    if get_origin(annotation) in (Union, types.UnionType):
        return datetime in get_args(annotation)
    return False


def _to_datetime(field_name: str, value: Any, record_name: str) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    raise MappingError(
        f"Failed to map row to {record_name}: field '{field_name}' expects a timestamp, "
        f"got {type(value).__name__}",
        fields=[field_name],
    )


def map_row_to_record(row: Mapping[str, Any], record_cls: Type[RecordType]) -> RecordType:
    """
    Build a `record_cls` instance from a row map.

    - Each declared field is looked up by name; absent keys map to None.
    - Temporal fields accept only a driver-native datetime (or None).
    - Other values are handed to the model unchanged; validation errors are
      rethrown as MappingError.
    - Keys not declared on the record are ignored.

    Raises:
        MappingError: if any field cannot be converted.
    """
    record_name = record_cls.__name__
    values: dict[str, Any] = {}

    for name, field in record_cls.model_fields.items():
        value = row.get(name)
        if is_temporal(field.annotation):
            values[name] = _to_datetime(name, value, record_name)
        else:
            values[name] = value

    try:
        return record_cls(**values)
    except ValidationError as exc:
        failed = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise MappingError(
            f"Failed to map row to {record_name}: invalid value(s) for {', '.join(failed) or 'record'}",
            fields=failed,
        ) from exc


def map_rows_to_records(rows: Iterable[Mapping[str, Any]], record_cls: Type[RecordType]) -> list[RecordType]:
    """
    Map a batch of rows, dropping rows that fail to map.

    A bad row is logged and skipped so one malformed row does not fail a whole page.
    """
    records: list[RecordType] = []
    for index, row in enumerate(rows):
        try:
            records.append(map_row_to_record(row, record_cls))
        except MappingError as exc:
            logger.error(
                "row_mapper.row_dropped",
                extra={"record": record_cls.__name__, "row_index": index, "fields": exc.fields, "reason": exc.message},
            )
    return records
