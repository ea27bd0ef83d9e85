"""Parser factory for routing exports to appropriate parsers.

This module orchestrates the parsing workflow:
1. Decode bytes and tokenize the text (quote-aware, delimiter detected)
2. Normalize the header row and detect the export format
3. Select appropriate parser (GenericCSVParser or format refinement)
4. Parse and return normalized rows
"""

import codecs
import logging

from txnflow.core.exceptions import DecodingError
from txnflow.parsers.detector import FormatDetector
from txnflow.parsers.generic import GenericCSVParser
from txnflow.parsers.refinements import CheckingAccountParser, CreditCardParser
from txnflow.parsers.tokenizer import is_blank_row, normalize_headers, tokenize
from txnflow.schemas.internal import NormalizedRow, ParsedFile

logger = logging.getLogger(__name__)


def decode_text(data: bytes) -> str:
    """Decode uploaded bytes as text.

    A UTF-16 byte order mark selects UTF-16 (spreadsheet "Unicode text"
    exports). Otherwise UTF-8 (with or without BOM) is tried first, then
    Latin-1, which some banks still use for exports.

    Raises:
        DecodingError: If the payload is binary (contains NUL bytes)
    """
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        try:
            return data.decode("utf-16")
        except UnicodeDecodeError as e:
            raise DecodingError({"reason": "invalid utf-16", "size_bytes": len(data)}) from e

    if b"\x00" in data:
        raise DecodingError({"reason": "binary payload", "size_bytes": len(data)})

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("Export is not valid UTF-8, falling back to latin-1")
        return data.decode("latin-1")


class ParserFactory:
    """Factory for parsing delimited bank exports.

    The factory handles the complete parsing workflow:
    - Tokenizes the text with the detected delimiter
    - Detects which export layout the header describes
    - Routes to appropriate parser (with graceful fallback)
    - Returns normalized rows

    Parsing never raises on malformed input: unknown layouts produce an
    empty result and malformed rows are dropped, both with a warning.

    Example:
        >>> factory = get_parser_factory()
        >>> rows = factory.parse("Date,Description,Amount\\n01/15/2024,COFFEE,-5.75")
        >>> rows[0].raw_amount
        Decimal('-5.75')
    """

    def __init__(self, detector: FormatDetector | None = None):
        """Initialize the parser factory.

        Args:
            detector: Format detector instance (default: new FormatDetector)
        """
        self.detector = detector or FormatDetector()

        # Registry of format-specific parser refinements
        # Format: {"format_code": ParserClass}
        self._refinements: dict[str, type[GenericCSVParser]] = {}

    def parse(self, text: str | bytes) -> list[NormalizedRow]:
        """Parse an export into normalized rows (input order preserved)."""
        return self.parse_file(text).rows

    def parse_file(self, text: str | bytes) -> ParsedFile:
        """Parse an export and report the detected format and dropped rows.

        Args:
            text: File content, decoded or raw bytes

        Returns:
            ParsedFile (empty when the bytes are not text or the layout
            is not recognized)
        """
        if isinstance(text, bytes):
            try:
                text = decode_text(text)
            except DecodingError as e:
                logger.warning("Export is not text, returning empty result", extra=e.details)
                return ParsedFile()

        rows = tokenize(text)
        if not rows:
            logger.warning("Export is empty")
            return ParsedFile()

        headers = normalize_headers(rows[0])
        header_names = [name for _, name in headers]
        format_code = self.detector.detect(header_names)
        if format_code is None:
            logger.warning("Unsupported export header", extra={"header": header_names})
            return ParsedFile(headers=header_names)

        parser_class = self._get_parser_class(format_code)
        data_rows = [row for row in rows[1:] if not is_blank_row(row)]

        try:
            parsed = parser_class().parse(headers, data_rows)
        except Exception as e:
            logger.warning(
                "Parser failed, returning empty result",
                extra={"format": format_code, "parser": parser_class.__name__, "error": str(e)},
                exc_info=True,
            )
            return ParsedFile(format_code=format_code, headers=header_names)

        logger.info(
            "Parsed export",
            extra={
                "format": format_code,
                "parser": parser_class.__name__,
                "rows": len(parsed.rows),
                "skipped_rows": parsed.skipped_rows,
            },
        )
        return parsed.model_copy(update={"format_code": format_code})

    def register_refinement(self, format_code: str, parser_class: type[GenericCSVParser]):
        """Register a format-specific parser refinement.

        Example:
            >>> from txnflow.parsers.refinements.credit import CreditCardParser
            >>> factory.register_refinement("credit", CreditCardParser)

        Args:
            format_code: Format code reported by the detector
            parser_class: Parser class (must inherit from GenericCSVParser)
        """
        if not issubclass(parser_class, GenericCSVParser):
            raise ValueError(
                f"Parser class must inherit from GenericCSVParser, got {parser_class}"
            )

        self._refinements[format_code] = parser_class

    def unregister_refinement(self, format_code: str):
        """Remove a format refinement. The format then uses GenericCSVParser."""
        self._refinements.pop(format_code, None)

    def get_registered_formats(self) -> list[str]:
        return list(self._refinements.keys())

    def _get_parser_class(self, format_code: str | None) -> type[GenericCSVParser]:
        if format_code and format_code in self._refinements:
            return self._refinements[format_code]

        # Graceful fallback to GenericCSVParser
        return GenericCSVParser


# Singleton factory instance for global use
_factory_instance: ParserFactory | None = None


def get_parser_factory() -> ParserFactory:
    """Get or create the global ParserFactory instance."""
    global _factory_instance
    if _factory_instance is None:
        _factory_instance = ParserFactory()
        _factory_instance.register_refinement("checking", CheckingAccountParser)
        _factory_instance.register_refinement("credit", CreditCardParser)
    return _factory_instance


def parse_csv(text: str | bytes) -> list[NormalizedRow]:
    """Convenience function to parse an export using the global factory."""
    return get_parser_factory().parse(text)
