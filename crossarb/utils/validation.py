"""Input validation for prices and market titles.

Every check raises a subclass of ``ValidationError`` so callers can isolate a
single bad listing or pair without aborting the whole batch.
"""

import math
from typing import Any, Sequence, Tuple


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


class InvalidPriceError(ValidationError):
    """Raised when a price is not a finite probability in [0, 1]."""
    pass


class MatchingError(ValidationError):
    """Raised when a title handed to the matcher is malformed."""
    pass


def validate_price(price: Any, label: str = "price") -> float:
    """Validate and normalize a probability price.

    Args:
        price: The price value to validate
        label: Label for error messages

    Returns:
        Normalized float price value

    Raises:
        InvalidPriceError: If price is not a finite number in [0, 1]
    """
    # bool is an int subclass; True/False are never prices
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise InvalidPriceError(f"{label} must be numeric, got {type(price).__name__}")

    price = float(price)

    if not math.isfinite(price):
        raise InvalidPriceError(f"{label} must be finite, got {price}")

    if not 0 <= price <= 1:
        raise InvalidPriceError(f"{label} must be between 0 and 1, got {price}")

    return price


def validate_legs(prices: Sequence[Any], label: str = "prices") -> Tuple[float, float]:
    """Validate a (yes, no) price pair.

    Raises:
        InvalidPriceError: If there are not exactly two legs or a leg is invalid
    """
    if isinstance(prices, (str, bytes)) or not isinstance(prices, Sequence):
        raise InvalidPriceError(f"{label} must be a (yes, no) sequence, got {type(prices).__name__}")
    if len(prices) != 2:
        raise InvalidPriceError(f"{label} must have exactly two legs, got {len(prices)}")
    yes, no = prices
    return validate_price(yes, f"{label}[yes]"), validate_price(no, f"{label}[no]")


def validate_volume(volume: Any, label: str = "volume") -> float:
    """Validate a volume figure; missing values count as zero."""
    if volume is None or volume == "":
        return 0.0
    try:
        value = float(volume)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be numeric, got {volume!r}") from exc
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{label} must be non-negative, got {value}")
    return value


def validate_title(title: Any, label: str = "title") -> str:
    """Validate a market title.

    Empty titles are allowed (they simply never match); non-strings are not.

    Raises:
        MatchingError: If title is not a string or is too long
    """
    if not isinstance(title, str):
        raise MatchingError(f"{label} must be a string, got {type(title).__name__}")

    if len(title) > 500:
        raise MatchingError(f"{label} is too long (max 500 characters)")

    return title
