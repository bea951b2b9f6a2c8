"""
Decimal string to IEEE-754 bit string encoder.

The fractional part of the literal is expanded by doubling an exact integer
numerator against a power-of-ten denominator, so no native float ever takes
part in the conversion. Results are truncated, never rounded.

Two modes are supported:

- "strict": canonical output. The exponent field is zero-padded, values below
  1.0 are normalized on their leading fractional one, and values outside the
  normal range raise.
- "legacy": reproduces the older encoder output byte for byte, including the
  unpadded exponent field and the broken normalization for a zero integer part.
"""

import logging
import warnings
from dataclasses import dataclass
from itertools import islice

from myhdl import intbv

from decimal_ieee754.fp_defs import BINARY32, BINARY64, FORMATS, FloatFormat

logger = logging.getLogger(__name__)

MODES = ("strict", "legacy")

# Legacy parse ranges (32-bit int, 64-bit long)
LEGACY_INT_MAX = 2**31 - 1
LEGACY_MAX_FRACTION_DIGITS = 18

# Digits per int() call, below the interpreter's string conversion limit
_CHUNK_DIGITS = 1000


class EncodingError(ValueError):
    """Base class for encoding failures."""


class MalformedInputError(EncodingError):
    """Input is not of the form [-]digits.digits"""


class NumericOverflowError(EncodingError):
    """Magnitude does not fit the target format or the parse range."""


class NumericUnderflowError(NumericOverflowError):
    """Nonzero magnitude is below the smallest normal number."""


class SilentInaccuracyWarning(UserWarning):
    """Legacy mode produced a value that differs from the input."""


@dataclass(frozen=True)
class DecimalLiteral:
    negative: bool
    integer_digits: str
    fractional_digits: str


@dataclass(frozen=True)
class EncodedFields:
    sign: str
    exponent: str
    mantissa: str
    exponent_value: int

    @property
    def bits(self) -> str:
        return self.sign + self.exponent + self.mantissa


def parse_decimal(text: str) -> DecimalLiteral:
    """
    Split a decimal literal into sign, integer digits and fractional digits.

    The leading '-' is removed from the integer digits, so the magnitude is
    always parsed as an unsigned value.
    """
    if not isinstance(text, str):
        raise TypeError(f"Decimal literal must be a string, got {type(text)}")

    s = text.strip()
    negative = s.startswith("-")
    index = s.find(".")
    if index < 0:
        raise MalformedInputError(f"Decimal literal must contain a '.', got {text!r}")

    integer_digits = s[1 if negative else 0 : index]
    fractional_digits = s[index + 1 :]
    for part in (integer_digits, fractional_digits):
        if not part or not (part.isascii() and part.isdigit()):
            raise MalformedInputError(f"Invalid decimal literal: {text!r}")

    return DecimalLiteral(negative, integer_digits, fractional_digits)


def digits_to_int(digits: str) -> int:
    """Parse an unsigned digit string of any length."""
    value = 0
    for start in range(0, len(digits), _CHUNK_DIGITS):
        chunk = digits[start : start + _CHUNK_DIGITS]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def int_to_binary(value: int) -> str:
    """Unsigned binary digits of value, most significant first. Zero gives ""."""
    bits = []
    while value > 0:
        bits.append(str(value % 2))
        value //= 2
    return "".join(reversed(bits))


def _doubling_bits(numerator: int, denominator: int):
    # Stops right after the last 1 of a terminating expansion
    while numerator != denominator:
        numerator *= 2
        yield "1" if numerator // denominator > 0 else "0"
        if numerator > denominator:
            numerator -= denominator


def fraction_to_binary(digits: str, limit: int) -> str:
    """
    Binary expansion of 0.<digits>, at most limit bits long.

    The expansion ends early when it terminates, e.g. "5" gives "1".
    """
    numerator = digits_to_int(digits)
    denominator = 10 ** len(digits)
    return "".join(islice(_doubling_bits(numerator, denominator), limit))


def _fit_mantissa(bits: str, width: int) -> str:
    if len(bits) < width:
        return bits + "0" * (width - len(bits))
    return bits[:width]


class DecimalToIEEE754Encoder:
    """
    Encodes decimal literals to binary32 or binary64 bit strings.

    The format and mode are fixed at construction and the encoder keeps no
    per-call state, so one instance can be shared between threads.
    """

    def __init__(self, fmt: FloatFormat = BINARY32, mode: str = "strict"):
        if fmt not in FORMATS.values():
            raise ValueError(f"Unsupported format: {fmt!r}")
        if mode not in MODES:
            raise ValueError(f"Mode must be one of {MODES}, got {mode!r}")
        self._fmt = fmt
        self._mode = mode

    @property
    def fmt(self) -> FloatFormat:
        return self._fmt

    @property
    def mode(self) -> str:
        return self._mode

    def __repr__(self) -> str:
        return f"DecimalToIEEE754Encoder({self._fmt.name}, mode={self._mode!r})"

    def encode(self, decimal: str) -> str:
        """Return sign, exponent and mantissa bits of decimal as one string."""
        return self._encode(decimal).bits

    def encode_fields(self, decimal: str) -> EncodedFields:
        return self._encode(decimal)

    def _encode(self, decimal: str) -> EncodedFields:
        # Every public method calls this directly, so legacy warnings use
        # stacklevel=4 to point at the public method's caller
        literal = parse_decimal(decimal)
        logger.debug("Encoding %r as %s (%s mode)", decimal, self._fmt.name, self._mode)
        if self._mode == "legacy":
            fields = self._encode_legacy(literal)
        else:
            fields = self._encode_strict(literal)
        logger.debug(
            "%r: exponent %d, fields %s|%s|%s",
            decimal,
            fields.exponent_value,
            fields.sign,
            fields.exponent,
            fields.mantissa,
        )
        return fields

    def _encode_strict(self, literal: DecimalLiteral) -> EncodedFields:
        fmt = self._fmt
        sign = "1" if literal.negative else "0"
        significant = literal.integer_digits.lstrip("0")
        if len(significant) > len(str(2 ** (fmt.max_exponent + 1))):
            raise NumericOverflowError(
                f"Integer part has {len(significant)} digits, exceeds the "
                f"{fmt.name} range"
            )
        int_value = digits_to_int(literal.integer_digits)
        numerator = digits_to_int(literal.fractional_digits)
        denominator = 10 ** len(literal.fractional_digits)

        if int_value == 0 and numerator == 0:
            return EncodedFields(
                sign, "0" * fmt.exp_bits, "0" * fmt.man_bits, -fmt.exp_bias
            )

        int_bits = int_to_binary(int_value)
        frac_bits = _doubling_bits(numerator, denominator)

        if int_bits:
            exponent = len(int_bits) - 1
            if exponent > fmt.max_exponent:
                raise NumericOverflowError(
                    f"{literal.integer_digits} exceeds the {fmt.name} range "
                    f"(exponent {exponent} > {fmt.max_exponent})"
                )
            needed = max(0, fmt.man_bits + 1 - len(int_bits))
            significand = int_bits + "".join(islice(frac_bits, needed))
        else:
            # Normalize on the first 1 of the fractional expansion
            leading_zeros = 0
            for bit in frac_bits:
                if bit == "1":
                    break
                leading_zeros += 1
                if leading_zeros >= -fmt.min_exponent:
                    raise NumericUnderflowError(
                        f"0.{literal.fractional_digits} is below the smallest "
                        f"normal {fmt.name} value (2^{fmt.min_exponent})"
                    )
            exponent = -(leading_zeros + 1)
            significand = "1" + "".join(islice(frac_bits, fmt.man_bits))

        exponent_bits = int_to_binary(exponent + fmt.exp_bias).zfill(fmt.exp_bits)
        mantissa = _fit_mantissa(significand[1:], fmt.man_bits)
        return EncodedFields(sign, exponent_bits, mantissa, exponent)

    def _encode_legacy(self, literal: DecimalLiteral) -> EncodedFields:
        fmt = self._fmt
        sign = "1" if literal.negative else "0"
        if len(literal.fractional_digits) > LEGACY_MAX_FRACTION_DIGITS:
            raise NumericOverflowError(
                f"Fractional part has {len(literal.fractional_digits)} digits, "
                f"at most {LEGACY_MAX_FRACTION_DIGITS} are supported"
            )
        significant = literal.integer_digits.lstrip("0")
        if len(significant) > len(str(LEGACY_INT_MAX)):
            raise NumericOverflowError(
                f"Integer part has {len(significant)} digits, exceeds {LEGACY_INT_MAX}"
            )
        int_value = digits_to_int(literal.integer_digits)
        if int_value > LEGACY_INT_MAX:
            raise NumericOverflowError(
                f"Integer part {literal.integer_digits} exceeds {LEGACY_INT_MAX}"
            )

        int_bits = int_to_binary(int_value)
        frac_bits = fraction_to_binary(
            literal.fractional_digits, fmt.expansion_bound + 1
        )
        if not int_bits:
            warnings.warn(
                f"Zero integer part in 0.{literal.fractional_digits}: legacy "
                "normalization drops the first fractional bit as the implicit 1",
                SilentInaccuracyWarning,
                stacklevel=4,
            )

        candidate = int_bits + frac_bits
        exponent = len(int_bits) - 1
        exponent_bits = int_to_binary(exponent + fmt.exp_bias)
        mantissa = _fit_mantissa(candidate[1:], fmt.man_bits)
        return EncodedFields(sign, exponent_bits, mantissa, exponent)

    def _require_strict(self, operation: str):
        if self._mode != "strict":
            raise ValueError(f"{operation} needs canonical output, use mode='strict'")

    def encode_word(self, decimal: str) -> intbv:
        """Pack the canonical encoding of decimal into a width-bit intbv."""
        self._require_strict("encode_word")
        fmt = self._fmt
        fields = self._encode(decimal)

        word = intbv(0)[fmt.width :]
        word[fmt.width - 1] = fields.sign == "1"
        word[fmt.width - 1 : fmt.man_bits] = int(fields.exponent, 2)
        word[fmt.man_bits :] = int(fields.mantissa, 2)
        return word

    def to_hex(self, decimal: str) -> str:
        """Return the hexadecimal representation."""
        word = self.encode_word(decimal)
        return f"0x{int(word):0{self._fmt.width // 4}x}"

    def explain(self, decimal: str) -> str:
        """Human-readable breakdown of the encoded fields."""
        fields = self._encode(decimal)
        negative = fields.sign == "1"
        biased = int(fields.exponent, 2)

        if self._mode == "strict" and biased == 0:
            return f"""
Binary representation: {fields.bits}
- Sign bit (S): {fields.sign} ({'negative' if negative else 'positive'})
- Exponent bits (E): {fields.exponent} = 0
- Mantissa bits (M): {fields.mantissa} = 0
Zero is represented with all exponent and mantissa bits cleared.
"""

        mantissa_decimal = int(fields.mantissa, 2) / 2 ** len(fields.mantissa)
        scale = 2.0**fields.exponent_value
        magnitude = (1 + mantissa_decimal) * scale
        return f"""
Binary representation: {fields.bits}
- Sign bit (S): {fields.sign} ({'negative' if negative else 'positive'})
- Exponent bits (E): {fields.exponent} = {biased} (unbiased: {fields.exponent_value})
- Mantissa bits (M): {fields.mantissa} = {mantissa_decimal:.6f} in decimal

Calculation:
v = (-1)^{fields.sign} × (1 + {mantissa_decimal:.6f}) × 2^({fields.exponent_value})
v = {-1 if negative else 1} × {1 + mantissa_decimal:.6f} × {scale!r}
v = {-magnitude if negative else magnitude!r}
"""


def binary32(mode: str = "strict") -> DecimalToIEEE754Encoder:
    return DecimalToIEEE754Encoder(BINARY32, mode)


def binary64(mode: str = "strict") -> DecimalToIEEE754Encoder:
    return DecimalToIEEE754Encoder(BINARY64, mode)
