from dataclasses import dataclass


@dataclass(frozen=True)
class FloatFormat:
    """
    Field layout of an IEEE-754 binary interchange format.

    - 1 sign bit
    - EXP_BITS exponent bits (biased by EXP_BIAS)
    - MAN_BITS mantissa bits (implicit leading 1 not stored)

    expansion_bound is the iteration bound used by the legacy fractional
    expansion. It is 53 rather than 52 for binary64, as legacy output
    depends on it.
    """

    name: str
    width: int
    exp_bits: int
    man_bits: int
    exp_bias: int
    expansion_bound: int

    @property
    def min_exponent(self) -> int:
        """Smallest unbiased exponent of a normal number."""
        return 1 - self.exp_bias

    @property
    def max_exponent(self) -> int:
        """Largest unbiased exponent of a finite number."""
        return self.exp_bias

    def extract_components_constants(self):
        """Return constants needed for component extraction"""
        sign_mask = 1 << (self.width - 1)
        exp_mask = ((1 << self.exp_bits) - 1) << self.man_bits
        man_mask = (1 << self.man_bits) - 1

        return sign_mask, exp_mask, man_mask, self.man_bits


BINARY32 = FloatFormat(
    name="binary32", width=32, exp_bits=8, man_bits=23, exp_bias=127, expansion_bound=23
)
BINARY64 = FloatFormat(
    name="binary64",
    width=64,
    exp_bits=11,
    man_bits=52,
    exp_bias=1023,
    expansion_bound=53,
)

FORMATS = {fmt.name: fmt for fmt in (BINARY32, BINARY64)}
