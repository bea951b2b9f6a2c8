import logging
import os
import warnings

from decimal_ieee754.encoder import (
    NumericOverflowError,
    SilentInaccuracyWarning,
    binary32,
    binary64,
    parse_decimal,
)
from decimal_ieee754.log_config import DEFAULT_LOGGING_LEVEL, setup_logging

LOG_LEVEL_ENV = "DECIMAL_IEEE754_LOG_LEVEL"


def log_level_from_env() -> str:
    """Log level named by the environment, or the default if unset or unknown."""
    level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOGGING_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOGGING_LEVEL
    return level


def format_report(value: str) -> str:
    """
    Build the text printed for one decimal literal: canonical binary and hex
    for both formats, followed by the legacy string.

    Raises MalformedInputError if value is not a decimal literal.
    """
    parse_decimal(value)

    lines = [f"\nDecimal: {value}"]
    pairs = ((binary32(), binary32("legacy")), (binary64(), binary64("legacy")))
    for strict, legacy in pairs:
        lines.append(f"  {strict.fmt.name}:")
        try:
            lines.append(f"    Binary: {strict.encode(value)}")
            lines.append(f"    Hex:    {strict.to_hex(value)}")
        except NumericOverflowError as e:
            lines.append(f"    Error:  {e}")

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", SilentInaccuracyWarning)
                lines.append(f"    Legacy: {legacy.encode(value)}")
            for w in caught:
                lines.append(f"    Note:   {w.message}")
        except NumericOverflowError as e:
            lines.append(f"    Legacy error: {e}")

    return "\n".join(lines)


def main():
    """
    Interactive CLI tool for exploring IEEE-754 encodings of decimal literals.
    """
    setup_logging(log_level_from_env())

    print("Decimal to IEEE-754 Converter")
    print("=============================")
    print("Enter decimal literals to see their binary32 and binary64 encodings")
    print("  - Values must contain a decimal point (e.g., 1.5, -2.0, 0.1)")
    print("  - Multiple values separated by commas")
    print("Enter 'q' or 'quit' to exit")
    print("=============================")

    while True:
        try:
            user_input = input("\nEnter value(s): ").strip()
        except EOFError:
            break

        if user_input.lower() in ("q", "quit", "exit"):
            print("Exiting converter. Goodbye!")
            break

        values = [v.strip() for v in user_input.split(",")]

        for value in values:
            try:
                print(format_report(value))
            except (ValueError, TypeError) as e:
                print(f"Error with input '{value}': {str(e)}")


if __name__ == "__main__":
    main()
