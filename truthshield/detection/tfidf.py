"""
Small TF-IDF text classifier.

Documents are added with a category label. A query is scored against every
document as the sum of ``tf * idf`` over its terms, and document scores are
summed per category.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

STOP_WORDS: FrozenSet[str] = frozenset(
    """
    a about above after again all also am an and another any are as at be because been before being below
    between both but by came can cannot come could did do does doing during each few for from further get got
    has had he have her here him himself his how if in into is it its itself like make many me might more most
    much must my myself never now of on only or other our ours ourselves out over own said same see should
    since so some still such take than that the their theirs them themselves then there these they this those
    through to too under until up very was way we well were what where when which while who whom with would
    why you your yours yourself
    """.split()
)

_TOKEN = re.compile(r"[a-z0-9_]+")


def tokenize(text: str) -> List[str]:
    return _TOKEN.findall(text.lower())


@dataclass
class Classification:
    category: Optional[str]
    confidence: float
    scores: Dict[str, float] = field(default_factory=dict)


class TfIdfClassifier:
    """Lightweight labelled-document classifier using TF-IDF scores."""

    def __init__(self, documents: Iterable[Tuple[str, str]] = ()):
        self._documents: List[Tuple[Counter, str]] = []
        self._doc_freq: Counter = Counter()
        for text, category in documents:
            self.add_document(text, category)

    def __len__(self) -> int:
        return len(self._documents)

    def add_document(self, text: str, category: str) -> None:
        terms = Counter(token for token in tokenize(text) if token not in STOP_WORDS)
        self._documents.append((terms, category))
        self._doc_freq.update(terms.keys())

    def idf(self, term: str) -> float:
        return 1 + math.log(len(self._documents) / (1 + self._doc_freq.get(term, 0)))

    def document_scores(self, text: str) -> List[Tuple[str, float]]:
        """Score ``text`` against each document, returning ``(category, score)`` pairs."""
        if not self._documents:
            return []
        terms = tokenize(text)
        idf = {term: self.idf(term) for term in set(terms)}
        return [
            (category, sum(doc_terms.get(term, 0) * idf[term] for term in terms))
            for doc_terms, category in self._documents
        ]

    def classify(self, text: str) -> Classification:
        scores: Dict[str, float] = {}
        total = 0.0
        for category, score in self.document_scores(text):
            scores[category] = scores.get(category, 0.0) + score
            total += abs(score)

        best_category, best_score = None, 0.0
        for category, score in scores.items():
            if score > best_score:
                best_category, best_score = category, score

        confidence = best_score / total if total > 0 else 0.0
        return Classification(category=best_category, confidence=confidence, scores=scores)
