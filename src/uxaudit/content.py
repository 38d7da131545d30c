"""Content quality analysis - readability, keyword placement and structure."""

import logging
import re
from collections import Counter
from typing import List, Optional, Sequence

from uxaudit.config import ScoringThresholds
from uxaudit.constants import (
    FIRST_WORDS_WINDOW,
    FLESCH_FORMULA,
    INTENT_AMBIGUOUS_SCORE,
    INTENT_MATCH_SCORE,
    INTENT_MISMATCH_SCORE,
    INTENT_PATTERNS,
    MAX_PRIMARY_KEYWORD_WORDS,
    MAX_REPEATED_PHRASE_FLAGS,
    NO_SUBHEADING_WORD_LIMIT,
    RECOMMENDED_DENSITY_RANGE,
    RELATED_TERMS,
    REPEATED_PHRASE_MIN_OCCURRENCES,
    REPEATED_PHRASE_WORDS,
    STOP_WORDS,
)
from uxaudit.models import (
    IntentType,
    KeywordPlacement,
    PrimaryKeywordAnalysis,
    SEOContentAnalysis,
    SignalSnapshot,
    StructureAnalysis,
    StuffingRisk,
)
from uxaudit.utils import clamp_score

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"[a-z0-9']+")
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
PARAGRAPH_BREAK = re.compile(r"\n{2,}")
PARAGRAPH_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")
SILENT_SUFFIX = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
VOWEL_GROUP = re.compile(r"[aeiouy]{1,2}")
PASSIVE_VOICE = re.compile(r"\b(am|is|are|was|were|be|been|being)\s+\w+ed\b", re.IGNORECASE)
BULLET_LINE = re.compile(r"\n\s*[-*•]\s+")
LIST_WORDS = re.compile(r"\b(first|second|third|steps?|checklist)\b", re.IGNORECASE)

COMPILED_INTENTS = [
    (IntentType(name), re.compile(pattern, re.IGNORECASE))
    for name, pattern in INTENT_PATTERNS.items()
]


def to_words(text: str) -> List[str]:
    """Lowercase alphanumeric word tokens."""
    return WORD_PATTERN.findall((text or "").lower())


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text or "") if s.strip()]


def split_paragraphs(text: str) -> List[str]:
    """Split on blank lines, or on sentence boundaries when there are none."""
    by_break = [p.strip() for p in PARAGRAPH_BREAK.split(text or "") if p.strip()]
    if len(by_break) > 1:
        return by_break
    return [p.strip() for p in PARAGRAPH_SENTENCE_BOUNDARY.split(text or "") if p.strip()]


def estimate_syllables(word: str) -> int:
    """Approximate syllable count using vowel groups.

    Args:
        word: Word to analyze

    Returns:
        Estimated syllable count (0 for words without letters)
    """
    clean = re.sub(r"[^a-z]", "", word.lower())
    if not clean:
        return 0
    if len(clean) <= 3:
        return 1

    stripped = SILENT_SUFFIX.sub("", clean)
    stripped = re.sub(r"^y", "", stripped)
    return max(1, len(VOWEL_GROUP.findall(stripped)))


def flesch_reading_ease(sentences: Sequence[str], words: Sequence[str]) -> float:
    """Flesch Reading Ease clamped to [0, 100]."""
    if not sentences or not words:
        return 0.0

    syllables = sum(estimate_syllables(word) for word in words)
    words_per_sentence = len(words) / len(sentences)
    syllables_per_word = syllables / len(words)
    score = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word

    return max(0.0, min(100.0, round(score, 1)))


def score_to_grade(score: float) -> str:
    """Convert Flesch Reading Ease score to grade level.

    Args:
        score: Flesch Reading Ease score (0-100)

    Returns:
        Grade level description
    """
    if score >= 90:
        return "5th Grade"
    elif score >= 80:
        return "6th Grade"
    elif score >= 70:
        return "7th Grade"
    elif score >= 60:
        return "8th-9th Grade"
    elif score >= 50:
        return "10th-12th Grade"
    elif score >= 30:
        return "College"
    else:
        return "Graduate"


def match_intent(text: str) -> IntentType:
    """Classify text by search intent; anything but a single hit is mixed."""
    hits = [intent for intent, pattern in COMPILED_INTENTS if pattern.search(text or "")]
    if len(hits) == 1:
        return hits[0]
    return IntentType.MIXED


def _percent(part: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(part / total * 100, 1)


def _format_number(value: float) -> str:
    return f"{value:g}"


class ContentAnalyzer:
    """Analyzes main text readability, keyword usage and structure."""

    FLESCH_FORMULA = FLESCH_FORMULA

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def analyze(
        self,
        title: str,
        headings: Sequence[str],
        main_text: str,
        meta_description: str = "",
        h1_text: str = "",
        subheadings: Optional[Sequence[str]] = None,
        primary_keyword: Optional[str] = None,
    ) -> SEOContentAnalysis:
        """Analyze page copy.

        Args:
            title: Page title
            headings: Headings in document order
            main_text: Main body text
            meta_description: Meta description, if any
            h1_text: Explicit H1 text (defaults to the first heading)
            subheadings: Explicit subheadings (defaults to headings after the first)
            primary_keyword: Keyword override

        Returns:
            SEOContentAnalysis with findings for each triggered condition
        """
        t = self.thresholds
        text = main_text or ""
        words = to_words(text)
        sentences = split_sentences(text)
        paragraphs = split_paragraphs(text)
        first_words = " ".join(words[:FIRST_WORDS_WINDOW])

        keyword = self._primary_keyword(title, h1_text, primary_keyword)
        keyword_count = self._count_occurrences(text, keyword)
        density = round(keyword_count / len(words) * 100, 2) if words else 0.0

        h1_source = (h1_text or (headings[0] if headings else "")).lower()
        if subheadings:
            sub_source = list(subheadings)
        else:
            sub_source = list(headings[1:])
        sub_lower = [item.lower() for item in sub_source]

        placement = KeywordPlacement(
            in_h1=bool(keyword) and keyword in h1_source,
            in_first_100_words=bool(keyword) and keyword in first_words,
            in_meta=bool(keyword) and keyword in (meta_description or "").lower(),
            subheading_matches=sum(1 for item in sub_lower if keyword and keyword in item),
        )

        repeated = self._repeated_phrases(words)
        stuffing_risk = self._stuffing_risk(density, len(repeated))

        sentence_lengths = [len(to_words(sentence)) for sentence in sentences]
        avg_sentence_length = (
            round(sum(sentence_lengths) / len(sentences), 1) if sentences else 0.0
        )
        passive_percent = _percent(
            sum(1 for sentence in sentences if PASSIVE_VOICE.search(sentence)),
            len(sentences),
        )
        long_percent = _percent(
            sum(1 for n in sentence_lengths if n > t.long_sentence_words), len(sentences)
        )
        complex_percent = _percent(
            sum(1 for n in sentence_lengths if n > t.complex_sentence_words), len(sentences)
        )
        readability = flesch_reading_ease(sentences, words)

        paragraph_lengths = [len(to_words(p)) for p in paragraphs]
        long_paragraphs = sum(1 for n in paragraph_lengths if n > t.long_paragraph_words)
        wall_paragraphs = sum(1 for n in paragraph_lengths if n > t.wall_of_text_words)

        structure = StructureAnalysis(
            long_paragraphs=long_paragraphs,
            wall_of_text_paragraphs=wall_paragraphs,
            no_subheading_after_300_words=(
                len(words) >= NO_SUBHEADING_WORD_LIMIT and not sub_source
            ),
            bullet_list_presence=bool(BULLET_LINE.search(text) or LIST_WORDS.search(text)),
            passive_voice_percent=passive_percent,
            long_sentence_percent=long_percent,
            complex_sentence_percent=complex_percent,
        )

        semantic_coverage = self._semantic_coverage(keyword, text)

        title_intent = match_intent(title)
        content_intent = match_intent(text)
        if IntentType.MIXED in (title_intent, content_intent):
            intent_score = INTENT_AMBIGUOUS_SCORE
        elif title_intent == content_intent:
            intent_score = INTENT_MATCH_SCORE
        else:
            intent_score = INTENT_MISMATCH_SCORE

        findings = self._findings(
            density, placement, structure, semantic_coverage, intent_score
        )

        logger.debug(
            f"content.analyze words={len(words)} keyword='{keyword}' "
            f"density={density} readability={readability}"
        )

        return SEOContentAnalysis(
            word_count=len(words),
            sentence_count=len(sentences),
            avg_sentence_length=avg_sentence_length,
            readability_score=clamp_score(readability),
            readability_grade=score_to_grade(readability) if words and sentences else "N/A",
            primary_keyword_analysis=PrimaryKeywordAnalysis(
                keyword=keyword,
                keyword_count=keyword_count,
                density=density,
                recommended_density_range=RECOMMENDED_DENSITY_RANGE,
                placement=placement,
                stuffing_risk=stuffing_risk,
                repeated_phrase_flags=repeated,
            ),
            structure_analysis=structure,
            semantic_coverage_score=semantic_coverage,
            intent_alignment_score=intent_score,
            findings=findings,
        )

    def analyze_snapshot(
        self, snapshot: SignalSnapshot, primary_keyword: Optional[str] = None
    ) -> SEOContentAnalysis:
        """Analyze the textual signals of a captured page."""
        return self.analyze(
            title=snapshot.title,
            headings=snapshot.headings,
            main_text=snapshot.main_text,
            meta_description=snapshot.meta_description,
            primary_keyword=primary_keyword,
        )

    def _primary_keyword(
        self, title: str, h1_text: str, override: Optional[str]
    ) -> str:
        if override and override.strip():
            return override.strip().lower()

        significant = [w for w in to_words(h1_text or title or "") if w not in STOP_WORDS]
        return " ".join(significant[:MAX_PRIMARY_KEYWORD_WORDS])

    def _count_occurrences(self, text: str, phrase: str) -> int:
        if not phrase:
            return 0
        return len(re.findall(rf"\b{re.escape(phrase)}\b", text.lower()))

    def _repeated_phrases(self, words: List[str]) -> List[str]:
        """Find 3-word phrases repeated often, skipping stopword phrases."""
        counts: Counter = Counter()
        for index in range(len(words) - REPEATED_PHRASE_WORDS + 1):
            window = words[index:index + REPEATED_PHRASE_WORDS]
            if any(word in STOP_WORDS for word in window):
                continue
            counts[" ".join(window)] += 1

        # Counter.most_common keeps first-seen order for ties
        repeated = [
            phrase for phrase, count in counts.most_common()
            if count >= REPEATED_PHRASE_MIN_OCCURRENCES
        ]
        return repeated[:MAX_REPEATED_PHRASE_FLAGS]

    def _stuffing_risk(self, density: float, repeated_count: int) -> StuffingRisk:
        t = self.thresholds
        if density > t.stuffing_high_density or repeated_count >= t.stuffing_high_repeats:
            return StuffingRisk.HIGH
        if density > t.stuffing_medium_density or repeated_count >= t.stuffing_medium_repeats:
            return StuffingRisk.MEDIUM
        return StuffingRisk.LOW

    def _semantic_coverage(self, keyword: str, text: str) -> int:
        """Share of related terms for the keyword that appear in the text."""
        keyword_words = to_words(keyword)
        terms: List[str] = []

        for keyword_word in keyword_words:
            for token, related in RELATED_TERMS.items():
                if token in keyword_word or keyword_word in token:
                    terms.extend(term for term in related if term not in terms)

        if not terms:
            terms = list(dict.fromkeys(keyword_words))
        if not terms:
            return 0

        lowered = text.lower()
        matches = sum(1 for term in terms if term.lower() in lowered)
        return clamp_score(matches / len(terms) * 100)

    def _findings(
        self,
        density: float,
        placement: KeywordPlacement,
        structure: StructureAnalysis,
        semantic_coverage: int,
        intent_score: int,
    ) -> List[str]:
        t = self.thresholds
        findings = []

        if density < t.density_min:
            findings.append(
                f"Primary keyword density is {_format_number(density)}% "
                f"(recommended {_format_number(t.density_min)}–{_format_number(t.density_max)}%)."
            )
        elif density > t.density_max:
            findings.append(
                f"Primary keyword density is {_format_number(density)}% and may feel repetitive."
            )

        if not placement.in_meta:
            findings.append("Primary keyword is missing from meta description.")

        if structure.long_sentence_percent > t.long_sentence_target:
            findings.append(
                f"{_format_number(structure.long_sentence_percent)}% sentences exceed "
                f"{t.long_sentence_words} words; split long paragraphs."
            )

        if structure.passive_voice_percent > t.passive_voice_target:
            findings.append(
                f"Passive voice is {_format_number(structure.passive_voice_percent)}% "
                f"(target below {_format_number(t.passive_voice_target)}%)."
            )

        if structure.long_paragraphs > 0:
            findings.append(
                f"{structure.long_paragraphs} paragraph(s) exceed {t.long_paragraph_words} words."
            )

        if semantic_coverage < t.semantic_coverage_floor:
            findings.append("Semantic coverage is low; add related terms to improve topical depth.")

        if intent_score < t.intent_alignment_floor:
            findings.append("Intent mismatch detected between title/keyword and body content style.")

        return findings
