"""Quote-aware tokenization of delimited bank exports.

Bank CSV exports are not consistent enough for the csv module's dialect
sniffing: some are tab separated, some carry a BOM, some embed the
delimiter inside quoted descriptions. The scanner here handles exactly
the subset we see in practice.
"""

BOM = "\ufeff"
QUOTE = '"'


def detect_delimiter(text: str) -> str:
    """Return tab if the first line contains a tab, else comma.

    Only the first line is inspected; the delimiter is global to the file.
    """
    first_line = text.split("\n", 1)[0]
    return "\t" if "\t" in first_line else ","


def tokenize(text: str, delimiter: str | None = None) -> list[list[str]]:
    """Split text into rows of fields.

    Rules:
        - `"` toggles quoting; `""` inside quotes is a literal quote
        - delimiter and newline separate fields/rows only outside quotes
        - carriage returns outside quotes are dropped

    Args:
        text: Decoded file content
        delimiter: Field separator (default: detected from first line)

    Returns:
        List of rows, each a list of raw (untrimmed) field strings
    """
    if delimiter is None:
        delimiter = detect_delimiter(text)

    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False

    i = 0
    length = len(text)
    while i < length:
        ch = text[i]

        if ch == QUOTE:
            if in_quotes and i + 1 < length and text[i + 1] == QUOTE:
                field.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif not in_quotes and ch == delimiter:
            row.append("".join(field))
            field = []
        elif not in_quotes and ch == "\n":
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
        elif not in_quotes and ch == "\r":
            pass
        else:
            field.append(ch)
        i += 1

    # Trailing row without a final newline
    if field or row:
        row.append("".join(field))
        rows.append(row)

    return rows


def normalize_headers(cells: list[str]) -> list[tuple[int, str]]:
    """Normalize a header row.

    Header cells are trimmed, stripped of any BOM and lowercased; empty
    cells are dropped. Each surviving header keeps its original column
    index so data rows stay aligned.

    Returns:
        List of (column_index, normalized_header) pairs
    """
    headers: list[tuple[int, str]] = []
    for index, cell in enumerate(cells):
        name = cell.replace(BOM, "").strip().lower()
        if name:
            headers.append((index, name))
    return headers


def is_blank_row(cells: list[str]) -> bool:
    return all(not cell.strip() for cell in cells)
