"""Validators for currency rate rules. Pure functions, no infrastructure or DB access.

Every validator returns the complete list of violations instead of stopping at the first
one, so a rejected batch can be corrected and resubmitted in a single round trip.
"""

import math
from typing import Any, Collection, List, Mapping, Optional

from rateboard.domain.violations import RateViolation, ViolationKind

BUY_RATE = "buy_rate"
SELL_RATE = "sell_rate"

_FIELD_LABELS = {BUY_RATE: "Buy rate", SELL_RATE: "Sell rate"}


def normalize_code(code: Any) -> str:
    """Currency codes are stored upper case and trimmed."""
    if code is None:
        return ""
    return str(code).strip().upper()


def coerce_rate(value: Any) -> Optional[float]:
    """Coerce a submitted rate to a finite float. Returns None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def validate_rate_pair(code: str, buy_rate: Any, sell_rate: Any) -> List[RateViolation]:
    """Check one buy/sell pair: both finite, both positive, sell strictly above buy."""
    violations: List[RateViolation] = []
    parsed = {}
    for field, raw in ((BUY_RATE, buy_rate), (SELL_RATE, sell_rate)):
        label = _FIELD_LABELS[field]
        value = coerce_rate(raw)
        if value is None:
            violations.append(
                RateViolation(
                    code=code,
                    kind=ViolationKind.NOT_A_NUMBER,
                    field=field,
                    message=f"{code}: {label} must be a valid number (received: {raw!r})",
                )
            )
        elif value <= 0:
            violations.append(
                RateViolation(
                    code=code,
                    kind=ViolationKind.NON_POSITIVE,
                    field=field,
                    message=f"{code}: {label} must be greater than 0 (received: {value:g})",
                )
            )
        parsed[field] = value

    buy, sell = parsed[BUY_RATE], parsed[SELL_RATE]
    if buy is not None and sell is not None and sell <= buy:
        violations.append(
            RateViolation(
                code=code,
                kind=ViolationKind.INVERTED_SPREAD,
                message=f"{code}: Sell rate ({sell:g}) must be greater than buy rate ({buy:g})",
            )
        )
    return violations


def _validate_code(
    raw_code: Any, code: str, allowed: Optional[Collection[str]]
) -> List[RateViolation]:
    if not code or (allowed is not None and code not in allowed):
        return [
            RateViolation(
                code=code or None,
                kind=ViolationKind.UNKNOWN_CODE,
                message=f"{code or raw_code!r}: Invalid currency code",
            )
        ]
    return []


def validate_rate_batch(
    batch: Mapping[str, Any],
    allowed_codes: Optional[Collection[str]] = None,
) -> List[RateViolation]:
    """
    Validate a whole batch {code -> {buy_rate, sell_rate}}.
    allowed_codes=None skips the code check; the update path passes the allow-list plus
    every code already stored, the create path passes the allow-list only.
    """
    if not batch:
        return [
            RateViolation(
                code=None,
                kind=ViolationKind.EMPTY_BATCH,
                message="Currency data is required",
            )
        ]

    allowed = None
    if allowed_codes is not None:
        allowed = {normalize_code(c) for c in allowed_codes}

    violations: List[RateViolation] = []
    seen = set()
    for raw_code, data in batch.items():
        code = normalize_code(raw_code)
        violations.extend(_validate_code(raw_code, code, allowed))
        if code and code in seen:
            violations.append(
                RateViolation(
                    code=code,
                    kind=ViolationKind.DUPLICATE_ENTRY,
                    message=f"{code}: Currency appears more than once in the batch",
                )
            )
        seen.add(code)
        if not isinstance(data, Mapping):
            violations.append(
                RateViolation(
                    code=code or None,
                    kind=ViolationKind.MISSING_DATA,
                    message=f"{code}: Currency data is missing",
                )
            )
            continue
        violations.extend(validate_rate_pair(code, data.get(BUY_RATE), data.get(SELL_RATE)))
    return violations


def validate_currency_create(
    code: Any,
    name: Optional[str],
    buy_rate: Any,
    sell_rate: Any,
    allowed_codes: Collection[str],
) -> List[RateViolation]:
    """Create path: the code must be allow-listed and a display name is required."""
    normalized = normalize_code(code)
    allowed = {normalize_code(c) for c in allowed_codes}
    violations = _validate_code(code, normalized, allowed)
    if not name or not name.strip():
        violations.append(
            RateViolation(
                code=normalized or None,
                kind=ViolationKind.MISSING_DATA,
                field="name",
                message=f"{normalized}: Currency name is required",
            )
        )
    violations.extend(validate_rate_pair(normalized, buy_rate, sell_rate))
    return violations
