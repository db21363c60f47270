import logging
from enum import Enum

from distance_monitor.errors import FormatError


class Polarity(Enum):
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NEUTRAL = 'neutral'


def polarity_of(sign):
    return Polarity.POSITIVE if sign == "+" else Polarity.NEGATIVE


def _split_digits(sign, digits):
    if not digits or not digits.isdigit():
        raise FormatError(sign, digits, "digits must be a non-empty run of 0-9")

    if len(digits) >= 4:
        # xxx.x: the last digit is the fractional part
        integer_part = digits[:-1].lstrip('0') or '0'
        fraction_part = digits[-1]
    else:
        integer_part = digits.lstrip('0') or '0'
        fraction_part = '0'

    return integer_part, fraction_part


def normalize(sign, digits, report=None):
    """
    Convert a raw sign + digit group into the displayed distance string.

    ``normalize("+", "09991")`` gives ``"+999.1m"``. Never raises: on failure the
    raw ``{sign}{digits}m`` form is returned, the error is logged and, when given,
    passed to ``report``.
    """
    try:
        integer_part, fraction_part = _split_digits(sign, digits)
        return f"{sign}{integer_part}.{fraction_part}m"
    except (FormatError, TypeError, AttributeError) as e:
        if not isinstance(e, FormatError):
            e = FormatError(sign, digits, str(e))
        logging.error(f"Format error: {e}")
        if report is not None:
            report(e)
        return f"{sign}{digits}m"
