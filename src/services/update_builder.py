"""Partial-update statements built from per-entity patch models.

A patch model's declared fields are the entity's allow-list. Only fields the
caller actually supplied are written; everything else is left untouched.
"""

import logging
from typing import Any, Mapping, Type, TypeVar, Union

from sqlalchemy import Table, func, update
from sqlalchemy.engine import Connection
from sqlalchemy.sql import Update
from sqlalchemy.sql.elements import ColumnElement

from src.models.common import PatchModel
from src.utils.errors import InputValidationError, NoFieldsToUpdate

logger = logging.getLogger(__name__)

PatchT = TypeVar("PatchT", bound=PatchModel)


def require_identity(key: Any) -> Any:
    """Reject empty identities before any statement is built."""
    if key is None or (isinstance(key, str) and not key.strip()):
        raise InputValidationError("An entity identifier is required")
    if isinstance(key, int) and key <= 0:
        raise InputValidationError(f"Invalid identifier: {key}")
    return key


def parse_patch(model: Type[PatchT], fields: Union[Mapping[str, Any], PatchT, None]) -> PatchT:
    """Validate a caller-supplied mapping into the entity's patch model."""
    if isinstance(fields, model):
        return fields
    if fields is None:
        fields = {}
    if not isinstance(fields, Mapping):
        raise InputValidationError("Update payload must be an object")
    return model.model_validate(dict(fields))


def collect_changes(patch: PatchModel) -> dict[str, Any]:
    """Supplied, allow-listed fields of a patch. Raises NoFieldsToUpdate when empty."""
    allowed = type(patch).model_fields.keys()
    changes = {
        name: value
        for name, value in patch.model_dump(exclude_unset=True).items()
        if name in allowed
    }
    if not changes:
        raise NoFieldsToUpdate()
    return changes


def build_update(table: Table, key: Any, changes: Mapping[str, Any], *criteria: ColumnElement) -> Update:
    """One parameterized UPDATE touching only the given columns."""
    unknown = [name for name in changes if name not in table.c]
    if unknown:
        raise InputValidationError(f"Unknown fields for {table.name}: {', '.join(sorted(unknown))}")

    values = dict(changes)
    if "updated_at" in table.c:
        values["updated_at"] = func.now()

    return update(table).where(table.c.id == key, *criteria).values(**values)


def apply_patch(
    conn: Connection,
    table: Table,
    key: Any,
    model: Type[PatchT],
    fields: Union[Mapping[str, Any], PatchT, None],
    *criteria: ColumnElement,
) -> int:
    """
    Validate, filter and write a partial update on an open connection.

    Extra criteria narrow the target row (e.g. role = 'seller'). Returns the
    number of matched rows; zero means the entity was not found in scope.
    """
    require_identity(key)
    changes = collect_changes(parse_patch(model, fields))
    result = conn.execute(build_update(table, key, changes, *criteria))

    logger.debug(
        "Partial update applied",
        extra={"table": table.name, "fields": sorted(changes), "rowcount": result.rowcount}
    )
    return result.rowcount
