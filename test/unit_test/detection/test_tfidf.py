"""Unit tests for the TF-IDF classifier."""

import math

import pytest

from truthshield.detection.tfidf import STOP_WORDS, TfIdfClassifier, tokenize


def test_tokenize_lowercases_and_splits_on_punctuation():
    assert tokenize("Verify YOUR account, now!") == ["verify", "your", "account", "now"]


def test_stop_words_are_dropped_from_documents():
    classifier = TfIdfClassifier([("you must verify the account", "phishing")])
    assert "you" in STOP_WORDS
    # "you", "must" and "the" are stop words so only two terms count
    assert classifier.idf("verify") == pytest.approx(1 + math.log(1 / 2))
    assert classifier.idf("you") == pytest.approx(1 + math.log(1 / 1))


def test_idf_formula():
    classifier = TfIdfClassifier(
        [
            ("bitcoin profit", "financial_scam"),
            ("bitcoin wallet", "financial_scam"),
            ("virus detected", "malware"),
            ("download antivirus", "malware"),
        ]
    )
    assert classifier.idf("bitcoin") == pytest.approx(1 + math.log(4 / 3))
    assert classifier.idf("virus") == pytest.approx(1 + math.log(4 / 2))
    assert classifier.idf("unseen") == pytest.approx(1 + math.log(4 / 1))


def test_classify_picks_the_category_with_the_highest_summed_score():
    classifier = TfIdfClassifier(
        [
            ("virus detected computer", "malware"),
            ("install update now", "malware"),
            ("meet alone tonight", "predator_behavior"),
        ]
    )
    result = classifier.classify("a virus was detected")
    assert result.category == "malware"
    assert result.confidence == pytest.approx(1.0)
    assert result.scores["predator_behavior"] == 0


def test_classify_splits_confidence_between_categories():
    classifier = TfIdfClassifier([("crypto scam", "financial_scam"), ("crypto virus", "malware")])
    result = classifier.classify("crypto")
    assert result.confidence == pytest.approx(0.5)


def test_classify_without_matches_has_no_category():
    classifier = TfIdfClassifier([("virus detected", "malware")])
    result = classifier.classify("lunch at noon")
    assert result.category is None
    assert result.confidence == 0.0


def test_empty_classifier_returns_no_category():
    classifier = TfIdfClassifier()
    assert len(classifier) == 0
    assert classifier.document_scores("anything") == []
    assert classifier.classify("anything").category is None
