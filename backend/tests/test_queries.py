"""
IdeaScope Backend — Query Builder Unit Tests
"""

import pytest

from ideascope.providers import ProviderKind
from ideascope.queries import (
    DOMAIN_FILTER,
    PRODUCT_CATEGORY_CLAUSE,
    build_queries,
    build_query,
    match_domain,
    negative_clause,
)

KEYWORDS = ["fitness", "workouts", "posture"]


class TestWebSearchQueries:
    def test_primary_contains_idea_and_filters(self, fitness_idea):
        queries = build_queries(fitness_idea, KEYWORDS, ProviderKind.WEB_SEARCH)

        assert queries.primary.startswith(f"{fitness_idea} apps competitors")
        assert DOMAIN_FILTER in queries.primary
        assert queries.primary.endswith(negative_clause())

    def test_negative_clause_excludes_content_pages(self):
        clause = negative_clause()
        assert clause.startswith("-inurl:(")
        for segment in ("blog", "review", "pricing", "listicle"):
            assert segment in clause

    def test_alternative_uses_keywords(self, fitness_idea):
        queries = build_queries(fitness_idea, KEYWORDS, ProviderKind.WEB_SEARCH)

        assert queries.alternative.startswith("fitness workouts posture")
        assert PRODUCT_CATEGORY_CLAUSE in queries.alternative

    def test_alternative_falls_back_to_idea_without_keywords(self):
        queries = build_queries("zz qq", [], ProviderKind.WEB_SEARCH)
        assert queries.alternative.startswith("zz qq")


class TestStructuredQAQueries:
    def test_instruction_embeds_idea(self, fitness_idea):
        query = build_query(fitness_idea, KEYWORDS, ProviderKind.STRUCTURED_QA)

        assert f'"{fitness_idea}"' in query
        assert "3-5 direct competitors" in query
        assert "Website:" in query

    def test_no_alternative(self, fitness_idea):
        assert build_queries(fitness_idea, KEYWORDS, ProviderKind.STRUCTURED_QA).alternative is None


class TestProductListingQueries:
    def test_fitness_vertical_appends_extra_terms(self, fitness_idea):
        queries = build_queries(fitness_idea, KEYWORDS, ProviderKind.PRODUCT_LISTING)

        assert queries.primary == f"{fitness_idea} AI form feedback"
        assert queries.alternative == "fitness workouts posture AI fitness coach form correction"

    def test_unmatched_vertical_uses_idea(self):
        queries = build_queries("Handmade ceramic mugs", ["handmade"], ProviderKind.PRODUCT_LISTING)

        assert queries.primary == "Handmade ceramic mugs"
        assert queries.alternative == "handmade"

    def test_match_domain(self):
        assert match_domain("A budget planner").extra_terms == "personal finance"
        assert match_domain("Handmade ceramic mugs") is None


def test_idea_text_is_not_modified(fitness_idea):
    original = str(fitness_idea)
    for kind in ProviderKind:
        build_queries(fitness_idea, KEYWORDS, kind)
    assert fitness_idea == original


@pytest.mark.parametrize("kind", list(ProviderKind))
def test_every_kind_builds_a_primary_query(kind, fitness_idea):
    assert build_query(fitness_idea, KEYWORDS, kind)
