"""Unit tests for guest expertise and episode insights"""

from lenny_search.insights import (
    extract_expertise_from_descriptions,
    get_episode_insights,
    get_guest_expertise,
)


class TestExtractExpertise:
    """Test phrase mining from episode descriptions"""

    def test_quoted_and_topic_phrases(self):
        areas = extract_expertise_from_descriptions([
            'Ada explores pricing strategy, "usage-based billing" and more.',
        ])
        assert areas == ["usage-based billing", "pricing strategy"]

    def test_topic_words_need_word_boundary(self):
        """Test 'on' inside 'conversation' does not start a phrase"""
        areas = extract_expertise_from_descriptions(["A long conversation on product management."])
        assert areas == ["product management"]

    def test_most_common_first(self):
        areas = extract_expertise_from_descriptions([
            "We talk about retention.",
            "A chat about onboarding.",
            "More about retention!",
        ])
        assert areas[0] == "retention"

    def test_stop_phrases_and_short_phrases_dropped(self):
        areas = extract_expertise_from_descriptions(['Subscribe to "this episode" about AI.'])
        assert areas == []

    def test_capped(self):
        descriptions = [f"All about topic number {i}." for i in range(20)]
        assert len(extract_expertise_from_descriptions(descriptions)) == 8

    def test_empty(self):
        assert extract_expertise_from_descriptions([]) == []


class TestGuestExpertise:
    """Test guest lookups"""

    def test_metadata_only(self, store):
        expertise = get_guest_expertise(store, "shreyas")

        assert expertise.name == "Shreyas Doshi"
        assert [ep.slug for ep in expertise.episodes] == ["shreyas-doshi", "shreyas-doshi-2"]
        assert expertise.episodes[1].date == "2024-08-01"
        assert expertise.top_keywords == ["product-management", "leadership"]
        assert expertise.expertise_areas == ["high agency", "pre-mortems", "product management"]
        assert expertise.bio is None
        assert expertise.key_themes is None

    def test_knowledge_profile_enriches(self, knowledge_store):
        expertise = get_guest_expertise(knowledge_store, "Brian Chesky")

        assert expertise.expertise_areas == ["leadership", "hiring"]
        assert expertise.bio == "Brian Chesky appeared on Lenny's Podcast once."
        assert expertise.key_themes == ["Be in the details"]

    def test_without_profile_uses_descriptions(self, store):
        expertise = get_guest_expertise(store, "Brian")
        assert "design-led leadership" in expertise.expertise_areas

    def test_ambiguous_query_keeps_one_guest(self, store):
        """Test a query matching several guests reports only the first one"""
        expertise = get_guest_expertise(store, "e")

        assert expertise.name == "Brian Chesky"
        assert [ep.slug for ep in expertise.episodes] == ["brian-chesky"]
        assert expertise.top_keywords == ["leadership", "founder mode"]

    def test_unknown_guest(self, store):
        assert get_guest_expertise(store, "nobody") is None


class TestEpisodeInsights:
    """Test knowledge-backed insights and the overview fallback"""

    def test_with_knowledge(self, knowledge_store):
        insights = get_episode_insights(knowledge_store, "brian-chesky")

        assert insights.guest == "Brian Chesky"
        assert insights.date == "2024-05-01"
        assert insights.summary.startswith("Brian explains")
        assert insights.key_insights == ["Be in the details", "Hire slowly"]
        assert insights.frameworks == [{"name": "Founder mode", "description": "Leaders stay close to the work"}]
        assert insights.quotes == [{"text": "Design is how it works.", "speaker": "Brian Chesky"}]
        assert insights.overview is None

    def test_overview_fallback(self, store):
        insights = get_episode_insights(store, "brian-chesky")

        assert insights.summary is None
        assert insights.keywords == ["leadership", "founder mode"]
        assert insights.overview.description.startswith("Brian discusses")
        assert "Welcome Brian" in insights.overview.intro
        assert insights.overview.closing.endswith("Thanks for coming on the podcast.")

    def test_episode_without_knowledge_entry(self, knowledge_store):
        insights = get_episode_insights(knowledge_store, "elena-verna")
        assert insights.overview is not None

    def test_unknown_episode(self, store):
        assert get_episode_insights(store, "nobody") is None
