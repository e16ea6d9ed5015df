"""In-memory full-text index over the crawl's JSON output.

Documents are ``{"url": ..., "content": ...}`` mappings keyed by ``url``;
only ``content`` is indexed. Scoring is BM25+ and a query matches a
document when any of its terms does.

Japanese text has no spaces between words, so :func:`tokenize` segments
by script: every run of hiragana, katakana or other word characters
becomes one token, and runs of kanji are cut into character bigrams.
"""
from __future__ import annotations

import json
import math
import re
import unicodedata
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Tuple, Union

from binran_search.logger import get_logger

__all__ = ("SearchIndex", "SearchResult", "tokenize", "highlight")

logger = get_logger("search")

_HAN = "\u3005-\u3007\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff"
_HIRAGANA = "\u3041-\u3096\u309d\u309e"
_KATAKANA = "\u30a1-\u30fa\u30fc-\u30ff\u31f0-\u31ff\uff66-\uff9f"
_TOKEN_RE = re.compile(
    rf"[{_HAN}]+|[{_HIRAGANA}]+|[{_KATAKANA}]+|(?:(?![{_HAN}{_HIRAGANA}{_KATAKANA}])\w)+"
)
_HAN_RUN_RE = re.compile(rf"[{_HAN}]{{2,}}")

# BM25+ parameters
_K1 = 1.2
_B = 0.7
_DELTA = 0.5
# weight of a term reached only through prefix expansion
_PREFIX_WEIGHT = 0.375


def process_term(term: str) -> str:
    return unicodedata.normalize("NFKC", term).lower()


def _bigrams(run: str) -> List[str]:
    return [run[i:i + 2] for i in range(len(run) - 1)]


def tokenize(text: str) -> List[str]:
    """Split *text* into lowercased word tokens, segmenting Japanese by script.

    Kanji compounds carry no word boundary a regex can see, so a run of
    two or more kanji yields its overlapping bigrams: ``学生便覧`` becomes
    ``学生``, ``生便``, ``便覧``.
    """
    tokens: List[str] = []
    for token in _TOKEN_RE.findall(unicodedata.normalize("NFKC", text)):
        if _HAN_RUN_RE.fullmatch(token):
            tokens.extend(_bigrams(token))
        else:
            tokens.append(process_term(token))
    return tokens


def _fold(text: str) -> Tuple[str, List[int]]:
    """NFKC-fold and lowercase *text*, mapping each folded character to its source index."""
    folded: List[str] = []
    origin: List[int] = []
    for i, char in enumerate(text):
        piece = process_term(char)
        folded.append(piece)
        origin.extend([i] * len(piece))
    return "".join(folded), origin


def highlight(text: str, terms: Iterable[str]) -> List[Tuple[str, bool]]:
    """Split *text* into ``(segment, is_match)`` pairs.

    Matching runs on the NFKC-folded, lowercased text, so ``ＺＥＮ`` in the
    content is marked for the term ``zen``; the returned segments are
    slices of the original *text*.
    """
    wanted = sorted({process_term(t) for t in terms if t}, key=len, reverse=True)
    if not wanted or not text:
        return [(text, False)] if text else []
    pattern = re.compile("|".join(re.escape(t) for t in wanted))
    folded, origin = _fold(text)

    parts: List[Tuple[str, bool]] = []
    pos = 0
    for m in pattern.finditer(folded):
        start, end = origin[m.start()], origin[m.end() - 1] + 1
        if start < pos:
            continue
        if start > pos:
            parts.append((text[pos:start], False))
        parts.append((text[start:end], True))
        pos = end
    if pos < len(text):
        parts.append((text[pos:], False))
    return parts


@dataclass(slots=True)
class SearchResult:
    id: str
    url: str
    content: str
    score: float
    terms: List[str] = field(default_factory=list)
    query_terms: List[str] = field(default_factory=list)

    def highlighted(self) -> List[Tuple[str, bool]]:
        return highlight(self.content, self.query_terms)


class SearchIndex:
    """BM25+ inverted index keyed by document URL."""

    def __init__(self) -> None:
        self._docs: Dict[str, Dict[str, str]] = {}
        self._lengths: Dict[str, int] = {}
        self._postings: Dict[str, Dict[str, int]] = defaultdict(dict)
        self._total_length = 0

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._docs

    @property
    def average_length(self) -> float:
        return self._total_length / len(self._docs) if self._docs else 0.0

    def add(self, doc: Mapping[str, str]) -> None:
        """Index one document; raises ValueError on a missing or duplicate ``url``."""
        doc_id = doc.get("url")
        if not isinstance(doc_id, str) or not doc_id:
            raise ValueError("document has no url")
        if doc_id in self._docs:
            raise ValueError(f"duplicate document id: {doc_id}")
        content = str(doc.get("content", ""))
        tokens = tokenize(content)
        self._docs[doc_id] = {"url": doc_id, "content": content}
        self._lengths[doc_id] = len(tokens)
        self._total_length += len(tokens)
        for term, freq in Counter(tokens).items():
            self._postings[term][doc_id] = freq

    def add_all(self, docs: Iterable[Mapping[str, str]]) -> None:
        for doc in docs:
            self.add(doc)

    def _expand(self, term: str, prefix: bool) -> List[Tuple[str, float]]:
        matches: List[Tuple[str, float]] = []
        if term in self._postings:
            matches.append((term, 1.0))
        if prefix:
            matches.extend(
                (candidate, _PREFIX_WEIGHT)
                for candidate in self._postings
                if candidate != term and candidate.startswith(term)
            )
        return matches

    def _term_score(self, term: str, doc_id: str) -> float:
        postings = self._postings[term]
        n_docs = len(self._docs)
        idf = math.log(1 + (n_docs - len(postings) + 0.5) / (len(postings) + 0.5))
        freq = postings[doc_id]
        norm = 1 - _B + _B * self._lengths[doc_id] / (self.average_length or 1)
        return idf * (_DELTA + freq * (_K1 + 1) / (freq + _K1 * norm))

    def search(self, query: str, prefix: bool = False) -> List[SearchResult]:
        """Return documents matching any term of *query*, best first."""
        query_terms = list(dict.fromkeys(tokenize(query)))
        scores: Dict[str, float] = defaultdict(float)
        matched_terms: Dict[str, List[str]] = defaultdict(list)
        matched_query: Dict[str, List[str]] = defaultdict(list)

        for query_term in query_terms:
            for term, weight in self._expand(query_term, prefix):
                for doc_id in self._postings[term]:
                    scores[doc_id] += weight * self._term_score(term, doc_id)
                    if term not in matched_terms[doc_id]:
                        matched_terms[doc_id].append(term)
                    if query_term not in matched_query[doc_id]:
                        matched_query[doc_id].append(query_term)

        results = [
            SearchResult(
                id=doc_id,
                url=self._docs[doc_id]["url"],
                content=self._docs[doc_id]["content"],
                score=score,
                terms=matched_terms[doc_id],
                query_terms=matched_query[doc_id],
            )
            for doc_id, score in scores.items()
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results

    @classmethod
    def from_documents(cls, docs: Iterable[Mapping[str, str]]) -> SearchIndex:
        index = cls()
        for doc in docs:
            try:
                index.add(doc)
            except (ValueError, AttributeError) as exc:
                logger.warning("Skipping document: %s", exc)
        return index

    @classmethod
    def load(cls, path: Union[str, Path]) -> SearchIndex:
        """Build an index from a JSON index file; a missing or malformed file gives an empty index."""
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Could not load index %s: %s", p, exc)
            return cls()
        if not isinstance(data, list):
            logger.error("Index %s must hold a JSON array, got %s", p, type(data).__name__)
            return cls()
        index = cls.from_documents(d for d in data if isinstance(d, dict))
        logger.info("Loaded %d documents from %s", len(index), p)
        return index

