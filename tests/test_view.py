"""Tests for the nested read-only views."""

from qsheet.sheet.view import build_sub_topic, build_topic, build_tree, render_text, tree_to_dicts


class TestBuildTree:
    """Tests for build_tree and friends."""

    def test_tree_follows_order_arrays(self, sample_store):
        topics = build_tree(sample_store.graph)
        assert [t.name for t in topics] == ["Arrays", "Graphs"]
        assert [st.name for st in topics[0].sub_topics] == ["Basics", "Advanced"]
        assert [q.title for q in topics[0].sub_topics[0].questions] == ["Two Sum", "Three Sum"]
        assert [t.order for t in topics] == [0, 1]

    def test_question_fields(self, sample_store):
        question = build_tree(sample_store.graph)[0].sub_topics[0].questions[0]
        assert question.difficulty == "Easy"
        assert question.link == "https://leetcode.com/problems/two-sum/"

    def test_dangling_ids_skipped(self, sample_store):
        sample_store.graph.find_topic("t-graphs").sub_topic_ids.insert(0, "s-ghost")
        topic = build_topic(sample_store.graph, "t-graphs")
        assert [st.id for st in topic.sub_topics] == ["s-bfs"]
        assert topic.sub_topics[0].order == 0

    def test_single_topic_and_sub_topic(self, sample_store):
        topic = build_topic(sample_store.graph, "t-graphs")
        assert topic.order == 1
        sub_topic = build_sub_topic(sample_store.graph, "s-advanced")
        assert sub_topic.order == 1
        assert [q.id for q in sub_topic.questions] == ["q-trap"]
        assert build_topic(sample_store.graph, "none") is None
        assert build_sub_topic(sample_store.graph, "none") is None

    def test_views_are_detached(self, sample_store):
        """Editing a view never changes the graph."""
        topics = sample_store.get_topics()
        topics[0].name = "Changed"
        topics[0].sub_topics.clear()
        assert sample_store.get_topics()[0].name == "Arrays"
        assert len(sample_store.get_topics()[0].sub_topics) == 2


class TestSerialization:
    """Tests for tree_to_dicts and render_text."""

    def test_dicts_use_camel_case(self, sample_store):
        data = tree_to_dicts(sample_store.get_topics())
        assert data[0]["subTopics"][0]["questions"][0] == {
            "id": "q-two-sum",
            "title": "Two Sum",
            "order": 0,
            "difficulty": "Easy",
            "link": "https://leetcode.com/problems/two-sum/",
        }
        # Optional fields omitted when absent
        assert "difficulty" not in data[1]["subTopics"][0]["questions"][0]

    def test_render_text_outline(self, sample_store):
        text = render_text(sample_store.get_topics())
        lines = text.splitlines()
        assert lines[0] == "1. Arrays"
        assert lines[1] == "   1. Basics"
        assert lines[2] == "      1. Two Sum (Easy)"
        assert "[t-arrays]" not in text

    def test_render_text_with_ids(self, sample_store):
        text = render_text(sample_store.get_topics(), show_ids=True)
        assert text.splitlines()[0] == "1. Arrays  [t-arrays]"

    def test_render_empty(self):
        assert render_text([]) == ""
