"""
Utility functions for the Referral Backend

Common helpers used across services, selectors and views.
"""
import functools
import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import DatabaseError, IntegrityError, OperationalError
from django.utils import timezone

from .constants import CENT
from .exceptions import DependencyFailureError, ValidationError

logger = logging.getLogger(__name__)


def quantize_money(value: Decimal) -> Decimal:
    """Round a Decimal half-up to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_decimal(value, field: str) -> Decimal:
    """
    Coerce user input (str, int, float, Decimal) to a finite Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        ValidationError: If the value is missing, not numeric or not finite
    """
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'{field} is required', details={'field': field})

    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field} must be a number', details={'field': field}) from None

    if not result.is_finite():
        raise ValidationError(f'{field} must be a finite number', details={'field': field})

    return result


def month_start(value: date | datetime) -> date:
    """Return the first day of the month containing value."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        value = value.date()
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """
    Shift a first-of-month date by a number of months (negative goes back).
    """
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def storage_guard(func):
    """
    Convert database availability failures into DependencyFailureError.

    IntegrityError is left alone: it signals a constraint violation, which
    callers handle as a business condition.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError:
            raise
        except (OperationalError, DatabaseError) as e:
            logger.error(f'{func.__qualname__} failed on storage: {e}')
            raise DependencyFailureError() from e

    return wrapper
