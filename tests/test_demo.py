from unittest.mock import patch

from bookstore_service import demo


def _patch_queries():
    explain = {"queryPlanner": {"winningPlan": {"stage": "COLLSCAN"}}, "executionStats": {"nReturned": 1}}
    return [
        patch("bookstore_service.queries.find_by_genre", return_value=[]),
        patch("bookstore_service.queries.find_published_after", return_value=[]),
        patch("bookstore_service.queries.find_projected", return_value=[]),
        patch("bookstore_service.queries.avg_price_by_genre", return_value=[]),
        patch("bookstore_service.queries.create_indexes", return_value=["title_1", "author_1_published_year_1"]),
        patch("bookstore_service.queries.explain_query", return_value=explain),
    ]


def test_demo_success_prints_every_step(capsys):
    patches = _patch_queries()
    for p in patches:
        p.start()
    try:
        assert demo.main() == 0
    finally:
        for p in patches:
            p.stop()

    out = capsys.readouterr().out
    for heading in ("1) Fiction books", "4) Aggregation: average price by genre",
                    '6) Explain example query (title = "1984")', "Demo complete."):
        assert heading in out
    assert "author_1_published_year_1" in out


def test_demo_failure_returns_nonzero(capsys):
    with patch("bookstore_service.queries.find_by_genre",
               side_effect=ConnectionError("Connection timed out.")), \
         patch("bookstore_service.demo.logger") as mock_logger:
        assert demo.main() == 1

    mock_logger.error.assert_called_once()
    assert "Demo complete." not in capsys.readouterr().out
