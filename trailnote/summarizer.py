from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List

from openai import OpenAI

STOPWORDS = frozenset([
    "the", "is", "at", "which", "on", "and", "a", "an", "of", "to", "in", "for", "with", "by",
    "as", "from", "that", "this", "it", "are", "was", "be", "or", "but", "not", "have", "has",
    "had", "will", "would", "can", "could", "should", "do", "does", "did",
])

NO_SUMMARY = "Summary not available"

_sentence_re = re.compile(r"[^.!?]+[.!?]+")
_non_word_re = re.compile(r"[^a-z0-9 ]")

SUMMARY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "summary": {"type": "string"},
        "keywords": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["summary", "keywords"]
}


def _words(text: str) -> List[str]:
    return [w for w in _non_word_re.sub("", text.lower()).split() if w]


def extract_keywords(text: str, limit: int = 5) -> List[str]:
    # Counter keeps first-seen order for equal counts
    freq = Counter(w for w in _words(text or "") if w not in STOPWORDS and len(w) > 2)
    return [w for w, _ in freq.most_common(limit)]


def summarize_text_rank(text: str, max_sentences: int = 3) -> str:
    """
    Keyword-overlap sentence ranking.

    Short texts (at most `max_sentences` sentences) come back joined as-is;
    otherwise the best scoring sentences are returned in score order.
    """
    sentences = _sentence_re.findall(text or "")
    if len(sentences) <= max_sentences:
        return " ".join(s.strip() for s in sentences)

    keywords = set(extract_keywords(text))
    scored = [(sum(1 for w in _words(s) if w in keywords), s) for s in sentences]
    # stable sort: ties keep document order
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return " ".join(s.strip() for _, s in scored[:max_sentences])


@dataclass
class SummaryResult:
    summary: str
    keywords: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary, "keywords": self.keywords}


class TextRankSummarizer:
    def __init__(self, max_sentences: int = 3, keyword_limit: int = 5):
        self.max_sentences = max_sentences
        self.keyword_limit = keyword_limit

    def summarize(self, title: str, text: str) -> SummaryResult:
        return SummaryResult(
            summary=summarize_text_rank(text, self.max_sentences),
            keywords=extract_keywords(text, self.keyword_limit),
        )


class OpenAISummarizer:
    """
    Wraps OpenAI calls. Returns a schema-constrained summary:
      {"summary": "...", "keywords": ["...", ...]}
    """

    def __init__(self, client: OpenAI, model: str, max_sentences: int = 3, keyword_limit: int = 5,
                 max_chars: int = 12000):
        self.client = client
        self.model = model
        self.max_sentences = max_sentences
        self.keyword_limit = keyword_limit
        self.max_chars = max_chars

    def summarize(self, title: str, text: str) -> SummaryResult:
        resp = self.client.responses.create(
            model=self.model,
            instructions=(
                "You summarize web pages for a browsing log. "
                f"Write at most {self.max_sentences} plain sentences. "
                f"Return at most {self.keyword_limit} single-word lowercase keywords. "
                "Do not invent content that is not in the page text."
            ),
            input=[{
                "role": "user",
                "content": [
                    {"type": "input_text", "text": f"Title: {title}\n\n{(text or '')[:self.max_chars]}"},
                ],
            }],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "page_summary",
                    "schema": SUMMARY_SCHEMA,
                    "strict": True,
                }
            },
        )

        data = json.loads(resp.output_text.strip())
        return SummaryResult(
            summary=(data.get("summary") or "").strip(),
            keywords=[k.strip() for k in (data.get("keywords") or []) if k and k.strip()][:self.keyword_limit],
        )
