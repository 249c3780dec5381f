"""
Capitalization-run candidate discovery.

Finds names that are not in the gazetteer by scanning the raw response for
runs of capitalized-style tokens. Each rule is a small function so it can be
tested on its own:

- tokenize(): word tokens (letters/digits with internal ".", "&", "'", "-"),
  possessive "'s" stripped
- capitalized_runs(): maximal runs of capitalized tokens separated only by
  spaces or tabs, broken by spans already claimed by gazetteer matches
- trim_run() / chunk_run(): drop leading/trailing stopwords, cut long runs
- follows_span(): a name glued to a gazetteer match ("Acme Corp Helpdesk")
  is a product of that brand, not a separate candidate
- rejection_reason(): the shared length/format filter (also applied to
  names proposed by the assisted strategy); generic words and category
  phrases ("Social Media") never form a name on their own
- discover_candidates(): ties the rules together and caps the result to the
  earliest distinct names

Example:
    >>> found = discover_candidates("Top picks: Zendesk and Help Scout.")
    >>> [c.text for c in found.candidates]
    ['Zendesk', 'Help Scout']
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from brand_visibility.config.constants import (
    GENERIC_PHRASES,
    GENERIC_TERMS,
    MAX_CANDIDATES,
    MAX_RUN_TOKENS,
    MIN_CANDIDATE_LENGTH,
    STOPWORDS,
)
from brand_visibility.extractor.normalizer import normalize

# A word starts and ends with a letter or digit; ".", "&", "'", "-" are kept
# only between word characters ("Monday.com", "AT&T", "Coca-Cola").
WORD_TOKEN_PATTERN = re.compile(r"[^\W_](?:[^\W_]|[.&'’-](?=[^\W_]))*")

POSSESSIVE_SUFFIXES = ("'s", "’s", "'S", "’S")

# Separator between a gazetteer match and a name attached to it: optional
# possessive, then spaces or tabs
ATTACHED_GAP_PATTERN = re.compile(r"(?:['’][sS])?[ \t]+")


@dataclass(frozen=True)
class Token:
    """A word token with its raw character span."""

    text: str
    start: int
    end: int


@dataclass(frozen=True)
class Candidate:
    """
    A discovered name occurrence.

    Attributes:
        text: Raw substring of the response (possessive stripped)
        normalized: normalize(text)
        start: Raw start offset
        end: Raw end offset (exclusive)
    """

    text: str
    normalized: str
    start: int
    end: int


@dataclass
class DiscoveryResult:
    """
    Output of discover_candidates().

    Attributes:
        candidates: Kept candidate occurrences in order of appearance
        considered: Number of distinct names examined before filtering
        rejected: Distinct raw names dropped by the filter or the cap
    """

    candidates: list[Candidate] = field(default_factory=list)
    considered: int = 0
    rejected: list[str] = field(default_factory=list)


def tokenize(text: str) -> list[Token]:
    """
    Split raw text into word tokens.

    Args:
        text: Raw response text

    Returns:
        Tokens in order, with possessive "'s" removed from their text and span

    Example:
        >>> [t.text for t in tokenize("Acme Corp's AT&T-based tool.")]
        ['Acme', 'Corp', 'AT&T-based', 'tool']
    """
    tokens: list[Token] = []
    for match in WORD_TOKEN_PATTERN.finditer(text):
        word = match.group(0)
        end = match.end()
        if len(word) > 2 and word.endswith(POSSESSIVE_SUFFIXES):
            word = word[:-2]
            end -= 2
        tokens.append(Token(text=word, start=match.start(), end=end))
    return tokens


def is_capitalized(token: Token) -> bool:
    """True if the token starts with an uppercase letter ("Zendesk", "HubSpot", "IBM")."""
    return token.text[:1].isupper()


def _is_inline_gap(gap: str) -> bool:
    """True if two tokens are separated only by spaces or tabs."""
    return bool(gap) and gap.strip(" \t") == ""


def _overlaps(token: Token, spans: Sequence[tuple[int, int]]) -> bool:
    return any(token.start < end and start < token.end for start, end in spans)


def capitalized_runs(
    text: str,
    tokens: Sequence[Token],
    blocked_spans: Sequence[tuple[int, int]] = (),
) -> list[list[Token]]:
    """
    Group consecutive capitalized tokens into maximal runs.

    A run is broken by a lowercase token, by any separator other than spaces
    or tabs (punctuation, newlines, possessives) and by tokens overlapping a
    blocked span.

    Args:
        text: Raw response text the tokens came from
        tokens: Output of tokenize(text)
        blocked_spans: Raw spans already claimed by gazetteer matches

    Returns:
        List of runs, each a non-empty list of tokens
    """
    runs: list[list[Token]] = []
    current: list[Token] = []

    for token in tokens:
        if not is_capitalized(token) or _overlaps(token, blocked_spans):
            if current:
                runs.append(current)
                current = []
            continue

        if current and not _is_inline_gap(text[current[-1].end : token.start]):
            runs.append(current)
            current = []

        current.append(token)

    if current:
        runs.append(current)

    return runs


def trim_run(run: Sequence[Token], stopwords: frozenset[str] = STOPWORDS) -> list[Token]:
    """
    Drop stopword tokens from both ends of a run.

    Example:
        "The Zendesk Suite" -> "Zendesk Suite"; "Top Tools" -> []
    """
    start, end = 0, len(run)
    while start < end and normalize(run[start].text) in stopwords:
        start += 1
    while end > start and normalize(run[end - 1].text) in stopwords:
        end -= 1
    return list(run[start:end])


def chunk_run(run: Sequence[Token], max_run_tokens: int = MAX_RUN_TOKENS) -> list[list[Token]]:
    """Cut a run into consecutive chunks of at most max_run_tokens tokens."""
    return [list(run[i : i + max_run_tokens]) for i in range(0, len(run), max_run_tokens)]


def follows_span(text: str, start: int, spans: Sequence[tuple[int, int]]) -> bool:
    """
    True if the name starting at `start` is attached to the end of a span.

    Attached means separated only by spaces or tabs, optionally after a
    possessive: "Acme Corp Helpdesk", "Acme Corp's Helpdesk".

    Example:
        >>> follows_span("Acme Corp Helpdesk", 10, [(0, 9)])
        True
        >>> follows_span("Acme Corp, Helpdesk", 11, [(0, 9)])
        False
    """
    return any(
        end <= start and ATTACHED_GAP_PATTERN.fullmatch(text, end, start) is not None
        for _, end in spans
    )


def rejection_reason(
    normalized: str,
    min_length: int = MIN_CANDIDATE_LENGTH,
    stopwords: frozenset[str] = STOPWORDS,
) -> str | None:
    """
    Apply the candidate length/format filter.

    Args:
        normalized: Normalized candidate name
        min_length: Minimum length in characters
        stopwords: Words that never form a brand name on their own (also
            trimmed from run edges)

    Returns:
        None if the candidate is acceptable, otherwise a short reason

    Example:
        >>> rejection_reason("the")
        'stopword'
        >>> rejection_reason("social media")
        'generic_phrase'
        >>> rejection_reason("help scout") is None
        True
    """
    if not normalized:
        return "empty"
    if len(normalized) < min_length:
        return "too_short"
    words = normalized.split(" ")
    if all(word.isdigit() for word in words):
        return "numeric"
    if normalized in GENERIC_PHRASES:
        return "generic_phrase"
    if all(word in stopwords for word in words):
        return "stopword"
    if all(word in stopwords or word in GENERIC_TERMS for word in words):
        return "generic"
    return None


def discover_candidates(
    text: str,
    blocked_spans: Sequence[tuple[int, int]] = (),
    max_candidates: int = MAX_CANDIDATES,
    max_run_tokens: int = MAX_RUN_TOKENS,
    min_length: int = MIN_CANDIDATE_LENGTH,
    stopwords: frozenset[str] = STOPWORDS,
) -> DiscoveryResult:
    """
    Discover capitalized-run name candidates in raw text.

    Keeps the earliest max_candidates distinct names (by normalized form)
    and every occurrence of each kept name. Runs that spell a generic
    category phrase and names attached to a blocked span are rejected.

    Args:
        text: Raw response text
        blocked_spans: Raw spans already matched by the gazetteer; a name
            directly following one is not a separate candidate
        max_candidates: Cap on distinct names
        max_run_tokens: Longest run kept as a single candidate
        min_length: Minimum candidate length
        stopwords: Stopword set

    Returns:
        DiscoveryResult with candidates in order of appearance
    """
    result = DiscoveryResult()
    occurrences: list[Candidate] = []
    seen: set[str] = set()

    for run in capitalized_runs(text, tokenize(text), blocked_spans):
        run_raw = text[run[0].start : run[-1].end]
        run_normalized = normalize(run_raw)
        if run_normalized in GENERIC_PHRASES:
            if run_normalized not in seen:
                seen.add(run_normalized)
                result.considered += 1
                result.rejected.append(run_raw)
            continue

        for chunk in chunk_run(trim_run(run, stopwords), max_run_tokens):
            # Chunk edges may expose stopwords again ("Zendesk Freshdesk And Intercom")
            chunk = trim_run(chunk, stopwords)
            if not chunk:
                continue
            start, end = chunk[0].start, chunk[-1].end
            raw = text[start:end]
            if follows_span(text, start, blocked_spans):
                if raw not in result.rejected:
                    result.rejected.append(raw)
                continue
            normalized = normalize(raw)

            if normalized not in seen:
                seen.add(normalized)
                result.considered += 1
                if rejection_reason(normalized, min_length, stopwords) is not None:
                    result.rejected.append(raw)

            if rejection_reason(normalized, min_length, stopwords) is None:
                occurrences.append(Candidate(text=raw, normalized=normalized, start=start, end=end))

    kept_names: list[str] = []
    for candidate in occurrences:
        if candidate.normalized in kept_names:
            continue
        if len(kept_names) < max_candidates:
            kept_names.append(candidate.normalized)
        elif candidate.text not in result.rejected:
            result.rejected.append(candidate.text)

    kept = set(kept_names)
    result.candidates = [c for c in occurrences if c.normalized in kept]
    return result
