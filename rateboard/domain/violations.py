"""Rate violation value objects. Shared by the validator and RateValidationError."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ViolationKind(str, Enum):
    NOT_A_NUMBER = "not_a_number"
    NON_POSITIVE = "non_positive"
    INVERTED_SPREAD = "inverted_spread"
    UNKNOWN_CODE = "unknown_code"
    MISSING_DATA = "missing_data"
    EMPTY_BATCH = "empty_batch"
    DUPLICATE_ENTRY = "duplicate_entry"


@dataclass(frozen=True)
class RateViolation:
    """One broken rule for one currency entry. field is None for entry-level rules."""

    code: Optional[str]
    kind: ViolationKind
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "kind": self.kind.value,
            "field": self.field,
            "message": self.message,
        }
