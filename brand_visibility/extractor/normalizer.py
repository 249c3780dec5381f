"""
Text normalization shared by every matching step.

normalize() canonicalizes response text and candidate names into one
comparable form:
- Lowercase
- Every character that is not a letter or digit becomes a separator
  (punctuation, symbols, underscores and whitespace alike)
- Separator runs collapse to a single space; ends are trimmed

normalize_with_offsets() produces the same string together with the raw
text index of each normalized character, so matches found in normalized
space map back to exact substrings of the raw response.

The function is pure and idempotent: normalize(normalize(x)) == normalize(x).

Examples:
    >>> normalize("  Acme Corp's  CRM!")
    'acme corp s crm'
    >>> normalize("Monday.com")
    'monday com'
    >>> normalize("")
    ''
"""


def normalize_with_offsets(text: str) -> tuple[str, list[int]]:
    """
    Normalize text and keep a map back to raw character offsets.

    Args:
        text: Raw text (response text or candidate name)

    Returns:
        Tuple of (normalized, offsets) where offsets[i] is the index in
        `text` that produced normalized[i]. A separator space maps to the
        first raw character of the separator run it replaced.

    Example:
        >>> normalize_with_offsets("Hi, Bob")
        ('hi bob', [0, 1, 2, 4, 5, 6])
    """
    chars: list[str] = []
    offsets: list[int] = []
    gap_start: int | None = None

    for index, ch in enumerate(text):
        # Lowercasing can expand one character into several (e.g. "İ"),
        # so each resulting character is classified on its own.
        for lowered in ch.lower():
            if lowered.isalnum():
                if gap_start is not None and chars:
                    chars.append(" ")
                    offsets.append(gap_start)
                gap_start = None
                chars.append(lowered)
                offsets.append(index)
            elif gap_start is None:
                gap_start = index

    return "".join(chars), offsets


def normalize(text: str) -> str:
    """
    Canonicalize text for comparison.

    Args:
        text: Any string

    Returns:
        Lowercased string of letters and digits separated by single spaces

    Example:
        >>> normalize("ACME, Inc.")
        'acme inc'
    """
    return normalize_with_offsets(text)[0]


def tokenize_normalized(normalized: str) -> list[tuple[int, int]]:
    """
    Split normalized text into token spans.

    Args:
        normalized: Output of normalize()

    Returns:
        List of (start, end) spans into `normalized`, one per token
    """
    spans: list[tuple[int, int]] = []
    start = 0
    for token in normalized.split(" "):
        if token:
            spans.append((start, start + len(token)))
        start += len(token) + 1
    return spans
