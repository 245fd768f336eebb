"""Tests for keyword relevance scoring and snippet selection."""

import pytest

from docs_qa.search.keyword import KeywordScorer, query_terms, select_snippet


def test_query_terms_drops_short_terms_and_punctuation() -> None:
    assert query_terms("What is the refund policy?") == ["what", "the", "refund", "policy"]
    assert query_terms("an AI ok") == []
    assert query_terms("--- ???") == []


def test_machine_learning_sentence_is_found(make_document) -> None:
    document = make_document("Machine learning is a subset of AI.")
    other = make_document("Gardening tips for the spring season and beyond.")

    results = KeywordScorer().score("machine learning", [document, other])

    assert len(results) == 1
    result = results[0]
    assert result.document.id == document.id
    assert result.raw_score > 0
    assert "Machine learning is a subset of AI" in result.snippet
    assert result.method == "keyword"


def test_no_matching_documents_returns_empty(make_document) -> None:
    documents = [make_document("Quarterly sales figures for the northern region.")]

    assert KeywordScorer().score("quantum entanglement", documents) == []


def test_query_without_usable_terms_returns_empty(make_document) -> None:
    documents = [make_document("An ox is on it.")]

    assert KeywordScorer().score("an ox", documents) == []


def test_confidence_is_normalized_by_term_count(make_document) -> None:
    weak = make_document("The refund takes a few days to arrive.", name="notes.txt")
    strong = make_document("The refund takes a few days to arrive.", name="refund_policy.txt")

    results = KeywordScorer().score("refund policy timeline", [weak, strong])

    assert [result.document.id for result in results] == [strong.id, weak.id]
    assert results[0].score == 1.0
    assert results[1].score == pytest.approx(2 / 30)


def test_results_are_ranked_and_limited(make_document) -> None:
    once = make_document("The invoice was sent on Monday morning.")
    twice = make_document("The invoice and a second invoice were sent.")
    thrice = make_document("Invoice, invoice, invoice: all three were sent.")

    results = KeywordScorer().score("invoice", [once, twice, thrice], k=2)

    assert [result.document.id for result in results] == [thrice.id, twice.id]


@pytest.mark.asyncio
async def test_search_is_the_async_strategy_entry_point(make_document) -> None:
    document = make_document("Shipping is free for orders over fifty dollars.")

    results = await KeywordScorer().search(query="free shipping", documents=[document], limit=3)

    assert len(results) == 1


def test_snippet_prefers_segment_with_most_terms() -> None:
    content = (
        "Our office opens at nine in the morning. "
        "Refunds follow the refund policy within thirty days. "
        "The policy was updated last year."
    )

    snippet = select_snippet(content, ["refund", "policy"])

    assert snippet == "Refunds follow the refund policy within thirty days"


def test_snippet_falls_back_to_window_around_first_term() -> None:
    content = "A" * 150 + ". Refund here. " + "B" * 250

    snippet = select_snippet(content, ["refund"])

    index = content.lower().find("refund")
    assert snippet == "..." + content[index - 100 : index + 200] + "..."


def test_snippet_falls_back_to_document_start() -> None:
    long_content = "x" * 400

    assert select_snippet(long_content, ["absent"]) == "x" * 300 + "..."
    assert select_snippet("short text", ["absent"]) == "short text"
    assert select_snippet("", ["absent"]) == ""
