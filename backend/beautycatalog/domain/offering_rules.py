"""Pricing and duration rules for professional offerings.

Pure functions only: no session, no I/O. The offering store calls them on
every create and update, and the API re-exposes them for pre-submit checks.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Optional, Protocol

from ..core.constants import (
    MAX_DURATION_FACTOR,
    MIN_DURATION_FACTOR,
    MIN_OFFERING_DURATION_MINUTES,
)
from ..core.exceptions import ValidationException


class PricedBaseService(Protocol):
    """Anything carrying a base price and base duration."""

    base_price: Any
    base_duration: Any


@dataclass(frozen=True)
class OfferingBounds:
    """Allowed price floor and duration band for one base service."""

    min_price: float
    min_duration: float
    max_duration: float

    def to_dict(self) -> dict[str, float]:
        return {
            "min_price": self.min_price,
            "min_duration": self.min_duration,
            "max_duration": self.max_duration,
        }


@dataclass(frozen=True)
class OfferingValidation:
    """Outcome of validating a price/duration pair."""

    bounds: OfferingBounds
    error: Optional[ValidationException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def format_amount(value: float) -> str:
    """Render 100.0 as "100" and 99.5 as "99.50"."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}"


def format_minutes(value: float) -> str:
    """Render 30.0 as "30" and 22.5 as "22.5"."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def offering_bounds(base: PricedBaseService) -> OfferingBounds:
    base_duration = float(base.base_duration)
    return OfferingBounds(
        min_price=float(base.base_price),
        min_duration=max(float(MIN_OFFERING_DURATION_MINUTES), base_duration * MIN_DURATION_FACTOR),
        max_duration=base_duration * MAX_DURATION_FACTOR,
    )


def validate_price(base: PricedBaseService, price: float) -> Optional[ValidationException]:
    """Price must be a finite number that does not undercut the base price."""
    bounds = offering_bounds(base)
    if not math.isfinite(float(price)):
        return ValidationException(
            "Price must be a finite number",
            code="PRICE_NOT_FINITE",
            details={"field": "price", "min_price": bounds.min_price, "price": str(price)},
        )
    if float(price) < bounds.min_price:
        return ValidationException(
            f"Price cannot be lower than the base price of ${format_amount(bounds.min_price)}",
            code="PRICE_BELOW_BASE",
            details={"field": "price", "min_price": bounds.min_price, "price": price},
        )
    return None


def validate_duration(base: PricedBaseService, duration: float) -> Optional[ValidationException]:
    """Duration must sit within [max(15, 50% of base), 200% of base]."""
    bounds = offering_bounds(base)
    if not math.isfinite(float(duration)):
        return ValidationException(
            "Duration must be a finite number of minutes",
            code="DURATION_NOT_FINITE",
            details={
                "field": "duration",
                "min_duration": bounds.min_duration,
                "max_duration": bounds.max_duration,
                "duration": str(duration),
            },
        )
    if float(duration) < bounds.min_duration:
        return ValidationException(
            f"Duration cannot be less than {format_minutes(bounds.min_duration)} minutes "
            "(50% of base duration)",
            code="DURATION_TOO_SHORT",
            details={
                "field": "duration",
                "min_duration": bounds.min_duration,
                "duration": duration,
            },
        )
    if float(duration) > bounds.max_duration:
        return ValidationException(
            f"Duration cannot exceed {format_minutes(bounds.max_duration)} minutes "
            "(200% of base duration)",
            code="DURATION_TOO_LONG",
            details={
                "field": "duration",
                "max_duration": bounds.max_duration,
                "duration": duration,
            },
        )
    return None


def validate_offering(
    base: PricedBaseService, price: float, duration: float
) -> OfferingValidation:
    """
    Check a price/duration pair against a base service.

    Price is checked first; the first violated rule is reported.
    """
    error = validate_price(base, price) or validate_duration(base, duration)
    return OfferingValidation(bounds=offering_bounds(base), error=error)


def ensure_valid_offering(
    base: PricedBaseService,
    price: Optional[float] = None,
    duration: Optional[float] = None,
) -> None:
    """
    Raise the first violation among the supplied fields.

    Fields left as None are not checked, so an update touching only the
    duration does not re-check a grandfathered price.
    """
    if price is not None:
        error = validate_price(base, price)
        if error is not None:
            raise error
    if duration is not None:
        error = validate_duration(base, duration)
        if error is not None:
            raise error
