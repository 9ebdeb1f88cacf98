"""
Arbitrary-Magnitude Number Module

Represents currency and production values as mantissa x 10^exponent so that
values spanning hundreds of orders of magnitude stay usable while only
double-precision arithmetic is used underneath. Operations never raise on
out-of-range results: they saturate to zero or to the INFINITY sentinel.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union
import math
import re


MAX_EXPONENT = 308
MIN_EXPONENT = -308
INFINITY_MANTISSA = 1.7976931348623157  # sys.float_info.max / 1e308

# Exponent gap beyond which the smaller addend is below double precision
PRECISION_GAP = 17

# Values with a smaller exponent print as plain decimals
DISPLAY_EXPONENT_THRESHOLD = 6

_NUMBER_PATTERN = re.compile(r'^([+-]?\d+(?:\.\d*)?|[+-]?\.\d+)(?:[eE]([+-]?\d+))?$')


def _shift_mantissa(mantissa: float, shift: int) -> float:
    """Divide mantissa by 10^shift without overflowing the power term"""
    if shift > 0:
        return mantissa / 10.0 ** shift
    if shift < -300:
        # 10.0 ** 309 overflows, so scale in two steps
        return mantissa * 1e300 * 10.0 ** (-shift - 300)
    return mantissa * 10.0 ** (-shift)


def _split_large_int(value: int):
    """Split an int too large for float() into (mantissa, exponent)"""
    magnitude = abs(value)
    # Keep about 17 significant digits; str() is capped on huge ints
    shift = max(int(magnitude.bit_length() * math.log10(2)) - 17, 0)
    mantissa = float(magnitude // 10 ** shift)
    return (-mantissa if value < 0 else mantissa), shift


def _normalize(mantissa: float, exponent: int):
    """Return (mantissa, exponent) with 1 <= |mantissa| < 10, or (0.0, 0)"""
    if math.isnan(mantissa) or mantissa == 0:
        return 0.0, 0

    if math.isinf(mantissa):
        return math.copysign(INFINITY_MANTISSA, mantissa), MAX_EXPONENT

    shift = math.floor(math.log10(abs(mantissa)))
    if shift:
        mantissa = _shift_mantissa(mantissa, shift)
        exponent += shift

    # log10 can be off by one ulp near powers of ten
    while abs(mantissa) >= 10:
        mantissa /= 10
        exponent += 1
    while abs(mantissa) < 1:
        mantissa *= 10
        exponent -= 1

    if exponent > MAX_EXPONENT or (exponent == MAX_EXPONENT and abs(mantissa) > INFINITY_MANTISSA):
        return math.copysign(INFINITY_MANTISSA, mantissa), MAX_EXPONENT

    if exponent < MIN_EXPONENT:
        return 0.0, 0

    return mantissa, exponent


@dataclass(frozen=True)
class BigNumber:
    """
    Immutable arbitrary-magnitude value.

    BigNumber(value) and BigNumber(mantissa, exponent) both normalize, so the
    mantissa is always in [1, 10) (signed) except for canonical zero {0, 0}.
    """
    mantissa: float = 0.0
    exponent: int = 0

    def __post_init__(self):
        mantissa = self.mantissa
        exponent = int(self.exponent)

        if isinstance(mantissa, int) and not isinstance(mantissa, bool) and abs(mantissa) >= 10 ** 300:
            mantissa, extra = _split_large_int(mantissa)
            exponent += extra

        normalized = _normalize(float(mantissa), exponent)
        object.__setattr__(self, 'mantissa', normalized[0])
        object.__setattr__(self, 'exponent', normalized[1])

    @classmethod
    def of(cls, value: 'Numeric') -> 'BigNumber':
        """Coerce an int, float, numeric string or BigNumber"""
        if isinstance(value, BigNumber):
            return value
        if isinstance(value, str):
            return parse_big_number(value)
        if isinstance(value, (int, float)):
            return cls(value)
        raise TypeError(f"Cannot convert {type(value).__name__} to BigNumber")

    # Arithmetic

    def __add__(self, other: 'Numeric') -> 'BigNumber':
        other = BigNumber.of(other)
        if other.is_zero():
            return self
        if self.is_zero():
            return other

        if self.exponent >= other.exponent:
            big, small = self, other
        else:
            big, small = other, self

        gap = big.exponent - small.exponent
        if gap > PRECISION_GAP:
            return big

        return BigNumber(big.mantissa + small.mantissa / 10.0 ** gap, big.exponent)

    __radd__ = __add__

    def __sub__(self, other: 'Numeric') -> 'BigNumber':
        return self + (-BigNumber.of(other))

    def __rsub__(self, other: 'Numeric') -> 'BigNumber':
        return BigNumber.of(other) + (-self)

    def __mul__(self, other: 'Numeric') -> 'BigNumber':
        other = BigNumber.of(other)
        if self.is_zero() or other.is_zero():
            return ZERO
        return BigNumber(self.mantissa * other.mantissa, self.exponent + other.exponent)

    __rmul__ = __mul__

    def __truediv__(self, other: 'Numeric') -> 'BigNumber':
        other = BigNumber.of(other)
        if other.is_zero():
            if self.is_zero():
                return ZERO
            return INFINITY if self.mantissa > 0 else -INFINITY
        if self.is_zero():
            return ZERO
        return BigNumber(self.mantissa / other.mantissa, self.exponent - other.exponent)

    def __rtruediv__(self, other: 'Numeric') -> 'BigNumber':
        return BigNumber.of(other) / self

    def __pow__(self, power: Union[int, float]) -> 'BigNumber':
        return self.pow(power)

    def __neg__(self) -> 'BigNumber':
        return BigNumber(-self.mantissa, self.exponent)

    def __abs__(self) -> 'BigNumber':
        return BigNumber(abs(self.mantissa), self.exponent)

    def pow(self, power: Union[int, float]) -> 'BigNumber':
        """
        Raise to an integer or real power.

        Works on log10 of the value so results far outside double range are
        still representable. x^0 is 1 for every x, 0^p is 0 for p > 0.
        """
        if isinstance(power, BigNumber):
            power = power.to_float()
        power = float(power)

        if power == 0:
            return ONE
        if self.is_zero():
            return ZERO if power > 0 else INFINITY

        sign = 1.0
        if self.mantissa < 0:
            if not power.is_integer():
                # No real result; saturate instead of producing NaN
                return ZERO
            if int(power) % 2 == 1:
                sign = -1.0

        log_value = (math.log10(abs(self.mantissa)) + self.exponent) * power

        if log_value > MAX_EXPONENT + 1:
            return INFINITY if sign > 0 else -INFINITY
        if log_value < MIN_EXPONENT - 1:
            return ZERO

        if abs(log_value) < MAX_EXPONENT - 1:
            # Inside double range the direct power is exact for small integers
            return BigNumber(sign * abs(self.to_float()) ** power)

        exponent = math.floor(log_value)
        mantissa = 10.0 ** (log_value - exponent)
        return BigNumber(sign * mantissa, exponent)

    # Comparison

    def _compare(self, other: 'Numeric') -> int:
        other = BigNumber.of(other)
        own_sign = self.sign()
        other_sign = other.sign()

        if own_sign != other_sign:
            return -1 if own_sign < other_sign else 1
        if own_sign == 0:
            return 0

        if self.exponent != other.exponent:
            # Larger exponent means larger magnitude; flips for negatives
            larger_magnitude = self.exponent > other.exponent
            return own_sign if larger_magnitude else -own_sign

        if self.mantissa == other.mantissa:
            return 0
        return 1 if self.mantissa > other.mantissa else -1

    def __eq__(self, other) -> bool:
        # Only BigNumber operands; plain numbers would need a matching hash
        if not isinstance(other, BigNumber):
            return NotImplemented
        return self._compare(other) == 0

    def __hash__(self) -> int:
        return hash((self.mantissa, self.exponent))

    def __lt__(self, other: 'Numeric') -> bool:
        return self._compare(other) < 0

    def __le__(self, other: 'Numeric') -> bool:
        return self._compare(other) <= 0

    def __gt__(self, other: 'Numeric') -> bool:
        return self._compare(other) > 0

    def __ge__(self, other: 'Numeric') -> bool:
        return self._compare(other) >= 0

    # State checks

    def is_zero(self) -> bool:
        """Check if value is exactly zero"""
        return self.mantissa == 0

    def is_positive(self) -> bool:
        """Check if value is positive"""
        return self.mantissa > 0

    def is_negative(self) -> bool:
        """Check if value is negative"""
        return self.mantissa < 0

    def is_infinite(self) -> bool:
        """Check if value sits on the saturation ceiling"""
        return self.exponent == MAX_EXPONENT and abs(self.mantissa) == INFINITY_MANTISSA

    def sign(self) -> int:
        if self.mantissa > 0:
            return 1
        if self.mantissa < 0:
            return -1
        return 0

    # Conversion

    def log10(self) -> float:
        """log10 of the absolute value (-inf for zero)"""
        if self.is_zero():
            return float('-inf')
        return math.log10(abs(self.mantissa)) + self.exponent

    def to_float(self) -> float:
        """Convert to a double; exact inverse of BigNumber(x) up to rounding"""
        if self.is_zero():
            return 0.0
        return self.mantissa * 10.0 ** self.exponent

    def to_string(self) -> str:
        """Format for display"""
        if self.is_infinite():
            return "Infinity" if self.mantissa > 0 else "-Infinity"

        if self.exponent < DISPLAY_EXPONENT_THRESHOLD:
            value = self.to_float()
            if abs(value - round(value)) < 0.001:
                return f"{round(value):d}"
            return f"{value:.2f}"

        mantissa = round(self.mantissa, 2)
        exponent = self.exponent
        if abs(mantissa) >= 10:
            # 9.995 and up rounds to 10.00; carry into the exponent
            mantissa /= 10
            exponent += 1
        return f"{mantissa:.2f}e{exponent}"

    def to_dict(self) -> Dict[str, Any]:
        return {"mantissa": self.mantissa, "exponent": self.exponent}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BigNumber':
        return cls(float(data["mantissa"]), int(data["exponent"]))

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"BigNumber({self.mantissa!r}, {self.exponent})"


Numeric = Union[BigNumber, int, float, str]

ZERO = BigNumber(0)
ONE = BigNumber(1)
TEN = BigNumber(10)
INFINITY = BigNumber(INFINITY_MANTISSA, MAX_EXPONENT)


def parse_big_number(value: str) -> BigNumber:
    """
    Parse "1.5e300", "-42", "0.25" or "Infinity" into a BigNumber

    Raises:
        ValueError: If the string is not a number
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    text = value.strip().replace(',', '')
    lowered = text.lower()
    if lowered in ("infinity", "inf", "+infinity", "+inf"):
        return INFINITY
    if lowered in ("-infinity", "-inf"):
        return -INFINITY

    match = _NUMBER_PATTERN.match(text)
    if not match:
        raise ValueError(f"Cannot convert '{value}' to BigNumber")

    mantissa_text, exponent_text = match.groups()
    exponent = int(exponent_text) if exponent_text else 0
    return BigNumber(float(mantissa_text), exponent)
