"""
Assisted extraction strategy: names proposed by an external completion call.

Sends the prompt and the response to a CompletionClient with an instruction
to list brand/company/product names one per line, then keeps only names that
are grounded in the response:

    normalize(name) must occur as a whitespace-bounded substring of
    normalize(response_text)

Each surviving occurrence becomes a Mention whose raw_text is the actual
substring of the response, never the text the completion call produced.
Gazetteer matches are always unioned in, so catalog names are detected even
if the completion call omits them. Gazetteer matches of the organization
always win over overlapping proposed names, and an unresolved name attached
to a gazetteer match ("Acme Corp Helpdesk") is not reported separately.

Failure handling:
- The call runs on a daemon worker thread bounded by assist_timeout_seconds;
  a worker stuck past the deadline is abandoned and never delays exit
- Timeouts, client exceptions and unparseable output raise
  ExternalAssistFailure subclasses; parser.analyze_response() catches them
  and falls back to the deterministic strategy

Example:
    >>> client = MockCompletionClient(output="Zendesk\\nSalesforce")
    >>> extractor = AssistedExtractor(client)
    >>> mentions = extractor.extract("Zendesk is popular.", [], "Acme", "help desk")
    >>> [m.raw_text for m in mentions]  # Salesforce is not in the text
    ['Zendesk']
"""

import json
import logging
import re
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from brand_visibility.completion.models import CompletionClient
from brand_visibility.config.constants import (
    ASSIST_EMPTY_MARKERS,
    ASSIST_SYSTEM_INSTRUCTION,
    ASSIST_USER_TEMPLATE,
)
from brand_visibility.config.schema import (
    BrandCatalogEntry,
    ExtractionSettings,
    KnownCompetitor,
)
from brand_visibility.exceptions import (
    ExternalAssistResponseError,
    ExternalAssistTimeoutError,
)
from brand_visibility.extractor.candidates import follows_span, rejection_reason
from brand_visibility.extractor.gazetteer import Gazetteer, build_gazetteer
from brand_visibility.extractor.mention_detector import (
    SOURCE_ASSISTED,
    ExtractionOutcome,
    Mention,
    find_gazetteer_mentions,
    remove_overlapping_mentions,
)
from brand_visibility.extractor.normalizer import normalize, normalize_with_offsets

logger = logging.getLogger(__name__)

# "1. Name", "2) Name", "- Name", "* Name", "• Name"
LIST_MARKER_PATTERN = re.compile(r"^\s*(?:[-*•·]+|\d+[.)])\s*")
QUOTE_CHARS = "\"'`“”‘’"
TRAILING_PUNCTUATION = ".,;:"


def build_user_content(prompt_text: str, response_text: str) -> str:
    """Format the user message sent to the completion call."""
    return ASSIST_USER_TEMPLATE.format(prompt_text=prompt_text, response_text=response_text)


def _clean_line(line: str) -> str:
    cleaned = LIST_MARKER_PATTERN.sub("", line.strip())
    cleaned = cleaned.strip().strip(QUOTE_CHARS).strip()
    cleaned = cleaned.rstrip(TRAILING_PUNCTUATION).strip()
    return cleaned.strip(QUOTE_CHARS).strip()


def parse_completion_output(output: object) -> list[str]:
    """
    Parse completion output into candidate names.

    Accepts either newline-separated names (list markers, quotes and trailing
    punctuation are stripped) or a JSON array of strings. Markdown code fences
    are ignored. Lines such as "None" mean "no names".

    Args:
        output: Raw value returned by CompletionClient.complete()

    Returns:
        Candidate names in the order given (may be empty)

    Raises:
        ExternalAssistResponseError: If output is not a string, or looks like
            a JSON array but isn't a valid array of strings

    Example:
        >>> parse_completion_output("1. Zendesk\\n2. \\"Freshdesk\\"\\n- Intercom.")
        ['Zendesk', 'Freshdesk', 'Intercom']
        >>> parse_completion_output('["HubSpot", "Pipedrive"]')
        ['HubSpot', 'Pipedrive']
    """
    if not isinstance(output, str):
        raise ExternalAssistResponseError(
            f"Expected text output from completion call, got {type(output).__name__}"
        )

    lines = [line for line in output.strip().splitlines() if not line.strip().startswith("```")]
    body = "\n".join(lines).strip()
    if not body:
        return []

    if body.startswith("["):
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise ExternalAssistResponseError(
                f"Completion output looks like JSON but could not be parsed: {e}"
            ) from e
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise ExternalAssistResponseError(
                "Completion output JSON must be an array of strings"
            )
        lines = data

    names: list[str] = []
    for line in lines:
        name = _clean_line(line)
        if name and normalize(name) not in ASSIST_EMPTY_MARKERS:
            names.append(name)
    return names


def find_grounded_spans(normalized_name: str, normalized_response: str) -> list[tuple[int, int]]:
    """
    Find whitespace-bounded occurrences of a normalized name.

    Args:
        normalized_name: normalize(candidate)
        normalized_response: normalize(response_text)

    Returns:
        (start, end) spans into normalized_response; empty if ungrounded

    Example:
        >>> find_grounded_spans("hub", "github and hub spot")
        [(11, 14)]
    """
    if not normalized_name:
        return []
    pattern = re.compile(r"(?<![^ ])" + re.escape(normalized_name) + r"(?![^ ])")
    return [(m.start(), m.end()) for m in pattern.finditer(normalized_response)]


@dataclass
class AssistedExtractor:
    """
    Extraction strategy delegating candidate discovery to a CompletionClient.

    Attributes:
        client: Any object implementing CompletionClient
        settings: Timeout, candidate filter and strict mode
    """

    client: CompletionClient
    settings: ExtractionSettings = field(default_factory=ExtractionSettings)
    method: str = "assisted"

    def extract(
        self,
        response_text: str,
        catalog: Sequence[BrandCatalogEntry],
        org_name: str,
        prompt_text: str,
    ) -> list[Mention]:
        """Return grounded mentions in order of first appearance."""
        return list(
            self.extract_outcome(response_text, catalog, org_name, prompt_text).mentions
        )

    def extract_outcome(
        self,
        response_text: str,
        catalog: Sequence[BrandCatalogEntry],
        org_name: str,
        prompt_text: str,
        gazetteer: Gazetteer | None = None,
        known_competitors: Iterable[KnownCompetitor] = (),
    ) -> ExtractionOutcome:
        """
        Call the completion client, ground its names and merge gazetteer hits.

        Args:
            response_text: Raw response text
            catalog: Caller's catalog (used when no gazetteer is passed)
            org_name: Organization name (used when no gazetteer is passed)
            prompt_text: Tracked prompt, sent along as context
            gazetteer: Prebuilt gazetteer
            known_competitors: Used when no gazetteer is passed

        Returns:
            ExtractionOutcome with method="assisted"

        Raises:
            ExternalAssistTimeoutError: If the call exceeds the timeout
            ExternalAssistResponseError: If the call fails or output is unparseable
        """
        if gazetteer is None:
            gazetteer = build_gazetteer(catalog, org_name, known_competitors)

        output = self._call_with_timeout(build_user_content(prompt_text, response_text))
        names = parse_completion_output(output)

        gazetteer_mentions = find_gazetteer_mentions(response_text, gazetteer)
        assisted, rejected, considered = self._ground_names(
            names,
            response_text,
            gazetteer,
            gazetteer_spans=[(m.start_offset, m.end_offset) for m in gazetteer_mentions],
        )
        mentions = remove_overlapping_mentions(gazetteer_mentions + assisted)

        logger.debug(
            f"Assisted extraction: {len(names)} proposed, {len(assisted)} grounded "
            f"occurrences, {len(gazetteer_mentions)} gazetteer hits, {len(rejected)} rejected"
        )

        return ExtractionOutcome(
            mentions=tuple(mentions),
            method=self.method,
            candidates_considered=considered,
            rejected_candidates=tuple(rejected),
        )

    def _call_with_timeout(self, user_content: str) -> object:
        """
        Run client.complete() on a daemon thread bounded by the timeout.

        The thread is abandoned when the join times out; being a
        daemon it never blocks interpreter exit.
        """
        timeout = self.settings.assist_timeout_seconds
        outcome: dict[str, object] = {}

        def call() -> None:
            try:
                outcome["output"] = self.client.complete(ASSIST_SYSTEM_INSTRUCTION, user_content)
            except Exception as e:
                # Re-raised on the calling thread below
                outcome["error"] = e

        worker = threading.Thread(target=call, name="assist", daemon=True)
        worker.start()
        worker.join(timeout)

        if worker.is_alive():
            raise ExternalAssistTimeoutError(
                f"External completion call did not respond within {timeout:g}s"
            )

        error = outcome.get("error")
        if isinstance(error, Exception):
            raise ExternalAssistResponseError(
                f"External completion call failed: {type(error).__name__}: {error}"
            ) from error

        return outcome.get("output")

    def _ground_names(
        self,
        names: Sequence[str],
        response_text: str,
        gazetteer: Gazetteer,
        gazetteer_spans: Sequence[tuple[int, int]] = (),
    ) -> tuple[list[Mention], list[str], int]:
        """
        Keep only names literally present in the response.

        Occurrences of an unresolved name attached to a gazetteer span are
        dropped; a name left with no occurrence is rejected.

        Returns:
            (mentions, rejected names, number of distinct names considered)
        """
        normalized_response, offsets = normalize_with_offsets(response_text)
        mentions: list[Mention] = []
        rejected: list[str] = []
        seen: set[str] = set()

        for name in names:
            key = normalize(name)
            if key in seen:
                continue
            seen.add(key)

            reason = rejection_reason(
                key, self.settings.min_candidate_length, self.settings.stopwords
            )
            if reason is not None:
                logger.debug(f"Dropped assisted name '{name}': {reason}")
                rejected.append(name)
                continue

            spans = find_grounded_spans(key, normalized_response)
            if not spans:
                logger.debug(f"Dropped ungrounded assisted name '{name}'")
                rejected.append(name)
                continue

            entry = gazetteer.resolve(key)
            if entry is None and not self.settings.discover_new_names:
                logger.debug(f"Dropped unresolved assisted name '{name}' (strict mode)")
                rejected.append(name)
                continue

            grounded = [(offsets[start], offsets[end - 1] + 1) for start, end in spans]
            if entry is None:
                grounded = [
                    (raw_start, raw_end)
                    for raw_start, raw_end in grounded
                    if not follows_span(response_text, raw_start, gazetteer_spans)
                ]
            if not grounded:
                logger.debug(f"Dropped assisted name '{name}' attached to a gazetteer match")
                rejected.append(name)
                continue

            for raw_start, raw_end in grounded:
                mentions.append(
                    Mention(
                        raw_text=response_text[raw_start:raw_end],
                        normalized_text=key,
                        start_offset=raw_start,
                        matched_entry=entry,
                        source=SOURCE_ASSISTED,
                        in_catalog=gazetteer.is_catalog_entry(entry),
                    )
                )

        return mentions, rejected, len(seen)
