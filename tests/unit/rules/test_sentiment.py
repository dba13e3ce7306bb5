# tests/unit/rules/test_sentiment.py
import pytest

from delivery_insights.models import Delivery, DeliveryStatus
from delivery_insights.rules.sentiment import (
    CommentPolarity,
    SentimentScorer,
    analyze_sentiment,
    get_top_comments,
)


def _d(comment, rating=None, driver="Jean (Vitry)"):
    return Delivery(
        date="2025-03-10", status=DeliveryStatus.DELIVERED, task_id="T", tour_id="R",
        sequence=1, warehouse="Vitry", driver=driver, depot="Vitry", carrier="STEF",
        comment=comment, rating=rating,
    )


@pytest.mark.parametrize("text", ["Rien à signaler", "RAS", "ras, merci", "Pas de problème"])
def test_nothing_to_report_phrases_score_high(text):
    assert analyze_sentiment(text).score >= 8.0


def test_ras_matches_whole_word_only():
    # "ras" inside a longer word is not the abbreviation
    assert analyze_sentiment("carasse").score == pytest.approx(5.0)


def test_rating_dominates_neutral_text():
    assert analyze_sentiment("colis", 1).score == pytest.approx(0.5)
    assert analyze_sentiment("colis", 3).score == pytest.approx(5.0)
    assert analyze_sentiment("colis", 5).score == pytest.approx(9.5)


def test_rating_score_is_nudged_by_text_and_clamped():
    assert analyze_sentiment("merci", 4).score == pytest.approx(7.9)
    assert analyze_sentiment("merci merci merci merci", 5).score == pytest.approx(10.0)
    assert analyze_sentiment("cassé déçu", 1).score == pytest.approx(0.0)


def test_text_only_maps_raw_score_onto_ten_point_scale():
    assert analyze_sentiment("Livreur aimable, rapide").score == pytest.approx(8.0)
    assert analyze_sentiment("colis cassé, déçu").score == pytest.approx(1.5)
    assert analyze_sentiment("").score == pytest.approx(5.0)


def test_score_is_always_in_range():
    very_bad = " ".join(["cassé"] * 10)
    assert analyze_sentiment(very_bad).score == pytest.approx(0.0)
    for rating in (None, 1, 2, 3, 4, 5):
        assert 0.0 <= analyze_sentiment(very_bad, rating).score <= 10.0


def test_multi_word_phrase_is_counted_once():
    result = SentimentScorer().lexicon_score("Livré en retard")
    assert result.score == pytest.approx(-3.0)
    assert result.negative_terms == ("livré en retard",)


def test_extra_terms_extend_the_lexicon():
    scorer = SentimentScorer(extra_terms={"nickel": 4})
    assert scorer.score("nickel").score == pytest.approx(7.0)
    assert "nickel" in scorer.score("nickel").positive_terms


def test_get_top_comments_positive_best_first():
    records = [
        _d("Livreur aimable", 4),      # 7.8
        _d("colis", 3),                 # 5.0, not positive
        _d("Livreur aimable merci", 5),  # 10.0
        _d("Bon", 5),                   # 9.8
        _d("x", 5),                     # too short
        _d(None, 5),
    ]
    top = get_top_comments(records, CommentPolarity.POSITIVE, 2)
    assert [c.comment for c in top] == ["Livreur aimable merci", "Bon"]
    assert top[0].driver == "Jean (Vitry)"


def test_get_top_comments_negative_worst_first():
    records = [
        _d("colis cassé", 2),   # 2.1
        _d("colis cassé", 1),   # 0.1
        _d("livreur aimable", 5),
    ]
    flop = get_top_comments(records, "negative")
    assert [c.score for c in flop] == pytest.approx([0.1, 2.1])
