# hr-dashboard/hr_dashboard/services/validation.py
"""
Row validation at the data-source boundary.

Every raw row coming back from an upstream source is parsed into one
``RowResult``: either a validated record or a ``RowValidationError``.
Rejected rows never abort a fetch; callers count them and move on.
"""
import logging
from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, NamedTuple, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from hr_dashboard.core.errors import RowValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class RowResult(Generic[T]):
    record: Optional[T] = None
    error: Optional[RowValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Batch(NamedTuple):
    """Validated records from one fetch, plus the rows that were rejected."""
    records: List[Any]
    rejected: List[RowValidationError]


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "row"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def parse_row(row: Any, model: Type[T], source: str, index: int) -> RowResult[T]:
    if not isinstance(row, dict):
        return RowResult(error=RowValidationError(source, index, "row is not an object"))
    try:
        return RowResult(record=model.model_validate(row))
    except ValidationError as exc:
        return RowResult(error=RowValidationError(source, index, _describe(exc)))


def parse_rows(rows: Iterable[Any], model: Type[T], source: str) -> List[RowResult[T]]:
    return [parse_row(row, model, source, i) for i, row in enumerate(rows)]


def validate_rows(rows: Iterable[Any], model: Type[T], source: str) -> Batch:
    return Batch(*partition_results(parse_rows(rows, model, source)))


def partition_results(results: Iterable[RowResult[T]]) -> Tuple[List[T], List[RowValidationError]]:
    valid: List[T] = []
    rejected: List[RowValidationError] = []
    for result in results:
        if result.ok:
            valid.append(result.record)
        else:
            rejected.append(result.error)
    if rejected:
        logger.warning(
            "Dropped %d malformed %s row(s); first: %s",
            len(rejected), rejected[0].source, rejected[0].reason,
            extra={"dropped": len(rejected)},
        )
    return valid, rejected
