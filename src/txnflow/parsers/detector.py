"""Export format detection from CSV header rows.

This module identifies which export layout a file uses based on the
normalized header names found in its first row.
"""


class FormatDetector:
    """Detects the export format from normalized header names.

    Known formats are matched on exact header names; every required group
    must be satisfied by at least one of its alternatives. When no known
    format matches, the detector falls back to "generic" if a date-like,
    an amount-like and a description-like column can all be found.

    Supported formats:
        - checking: checking-account export (posting date / details / description / amount)
        - credit: credit-card export (transaction date / post date / description / amount)
        - generic: any header with resolvable date, amount and description columns

    Example:
        >>> detector = FormatDetector()
        >>> detector.detect(["date", "description", "amount"])
        'generic'
    """

    # Ordered: first match wins
    FORMAT_RULES: dict[str, list[tuple[str, ...]]] = {
        "checking": [
            ("posting date",),
            ("details",),
            ("description",),
            ("amount",),
        ],
        "credit": [
            ("transaction date", "trans date"),
            ("post date",),
            ("description",),
            ("amount",),
        ],
    }

    GENERIC = "generic"

    # Substring hints for the generic fallback
    DATE_HINTS = ("date",)
    AMOUNT_HINTS = ("amount", "debit", "credit")
    DESCRIPTION_HINTS = ("description", "memo", "detail", "payee", "merchant")

    def __init__(self):
        self._rules: dict[str, list[tuple[str, ...]]] = {
            code: list(groups) for code, groups in self.FORMAT_RULES.items()
        }

    def detect(self, headers: list[str]) -> str | None:
        """Detect the export format.

        Args:
            headers: Normalized (lowercased, trimmed) header names

        Returns:
            Format code ("checking", "credit", "generic") or None
        """
        if not headers:
            return None

        header_set = set(headers)
        for format_code, groups in self._rules.items():
            if self._matches_format(header_set, groups):
                return format_code

        if self.is_generic(headers):
            return self.GENERIC

        return None

    def is_generic(self, headers: list[str]) -> bool:
        return (
            self._has_hint(headers, self.DATE_HINTS)
            and self._has_hint(headers, self.AMOUNT_HINTS)
            and self._has_hint(headers, self.DESCRIPTION_HINTS)
        )

    def _matches_format(self, header_set: set[str], groups: list[tuple[str, ...]]) -> bool:
        return all(
            any(alternative in header_set for alternative in group) for group in groups
        )

    @staticmethod
    def _has_hint(headers: list[str], hints: tuple[str, ...]) -> bool:
        return any(hint in header for header in headers for hint in hints)

    def get_supported_formats(self) -> list[str]:
        """Get list of supported format codes, generic last."""
        return [*self._rules.keys(), self.GENERIC]

    def add_format(self, format_code: str, required_groups: list[tuple[str, ...]]) -> None:
        """Register an additional exact-header format at runtime.

        Formats added later are tried after the built-in ones.

        Args:
            format_code: Code to report when the format matches
            required_groups: Header alternatives that must all be present
        """
        self._rules[format_code] = [
            tuple(alternative.lower() for alternative in group) for group in required_groups
        ]
