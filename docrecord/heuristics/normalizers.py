"""
Data Normalizers Module.

Normalization helpers for pattern-extracted values:
    - Currency/amount strings to floats
    - Date strings to ISO format (used for derived titles; the date
      fields themselves are emitted unnormalized)

Author: ML Engineering Team
"""

import re
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

from docrecord.utils.logger import get_logger

logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes date strings to ISO format (YYYY-MM-DD).

    Explicit formats are tried first, then dateutil's fuzzy parser.

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("2/14/2026")
        "2026-02-14"
        >>> normalizer.normalize("February 14, 2026")
        "2026-02-14"
    """

    INPUT_FORMATS = [
        "%Y-%m-%d",
        "%m/%d/%Y",
        "%B %d, %Y",
        "%b %d, %Y",
        "%d/%m/%Y",
        "%m-%d-%Y",
        "%d.%m.%Y",
    ]

    def __init__(self, output_format: str = "%Y-%m-%d") -> None:
        self.output_format = output_format

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date string to the output format.

        Args:
            date_str: Input date string in any recognized format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        if not date_str:
            return None

        date_str = ' '.join(date_str.split())
        # Ordinal suffixes (1st, 2nd, 3rd, 4th)
        date_str = re.sub(r'(\d+)(st|nd|rd|th)\b', r'\1', date_str, flags=re.IGNORECASE)

        parsed = self._try_explicit_formats(date_str)
        if parsed is None:
            parsed = self._try_dateutil_parser(date_str)

        if parsed is None:
            logger.debug(f"Could not parse date: {date_str}")
            return None
        return parsed.strftime(self.output_format)

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        for fmt in self.INPUT_FORMATS:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        # Require at least a plausible year so fuzzy parsing does not
        # invent dates from stray digits.
        if not re.search(r'\d{4}', date_str):
            return None
        try:
            return date_parser.parse(date_str, dayfirst=False, fuzzy=True)
        except (ValueError, OverflowError):
            return None


class AmountNormalizer:
    """
    Normalizes currency/amount strings to floats.

    Handles currency symbols and codes, thousands separators and
    European decimal commas.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_float("$1,234.56")
        1234.56
        >>> normalizer.to_float("€ 3,50")
        3.5
    """

    CURRENCY_SYMBOLS = ['$', '€', '£', '¥']
    CURRENCY_CODES = ['USD', 'EUR', 'GBP']

    def to_float(self, amount_str: str) -> Optional[float]:
        """
        Convert an amount string to a float.

        Args:
            amount_str: Amount string, optionally with currency marks.

        Returns:
            Float value, or None if the string is not an amount.
        """
        if not amount_str:
            return None

        cleaned = self._clean_amount_string(amount_str)
        if not cleaned:
            return None

        cleaned = self._handle_european_format(cleaned)
        cleaned = cleaned.replace(',', '')

        try:
            return float(cleaned)
        except ValueError:
            logger.debug(f"Could not parse amount: {amount_str}")
            return None

    def _clean_amount_string(self, amount_str: str) -> str:
        amount_str = ''.join(amount_str.split())
        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')
        for code in self.CURRENCY_CODES:
            amount_str = re.sub(rf'{code}', '', amount_str, flags=re.IGNORECASE)
        return re.sub(r'[^\d,.\-]', '', amount_str)

    def _handle_european_format(self, amount_str: str) -> str:
        """
        Convert a European amount (comma decimal) to dot decimal.

        A single comma after the last dot followed by at most two digits
        is taken as the decimal separator.
        """
        if amount_str.count(',') == 1:
            comma_pos = amount_str.rfind(',')
            dot_pos = amount_str.rfind('.')
            if comma_pos > dot_pos:
                after_comma = amount_str[comma_pos + 1:]
                if len(after_comma) <= 2 and after_comma.isdigit():
                    amount_str = amount_str.replace('.', '').replace(',', '.')
        return amount_str
