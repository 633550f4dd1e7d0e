"""Tests for SheetStore: edits, cascade deletes, moves and undo/redo."""

import pytest

from qsheet.sheet.entities import Difficulty
from qsheet.sheet.store import MutationResult, SheetStore
from qsheet.sheet.view import tree_to_dicts


def tree(store):
    return tree_to_dicts(store.get_topics())


def topic_names(store):
    return [t.name for t in store.get_topics()]


def add(store, result):
    """Assert success and return the new entity id."""
    assert result.success, result.error
    assert result.entity_id
    return result.entity_id


# ─────────────────────────────────────────────────────────────────────────────
# Create / rename / delete
# ─────────────────────────────────────────────────────────────────────────────


class TestTopics:
    """Topic create, rename, delete."""

    def test_add_topic_appends_and_expands(self, store):
        first = add(store, store.add_topic("Arrays"))
        second = add(store, store.add_topic("  Graphs  "))
        assert store.graph.topic_order() == [first, second]
        assert topic_names(store) == ["Arrays", "Graphs"]
        assert store.is_topic_expanded(second)

    def test_add_topic_assigns_unique_ids(self, store):
        ids = {add(store, store.add_topic(f"Topic {i}")) for i in range(10)}
        assert len(ids) == 10

    def test_duplicate_rejected_without_history(self, store):
        """'Arrays' is rejected when 'arrays' exists; nothing is recorded."""
        add(store, store.add_topic("arrays"))
        history_before = len(store.history)

        result = store.add_topic("Arrays")

        assert result.success is False
        assert result.error == "Topic name already exists"
        assert topic_names(store) == ["arrays"]
        assert len(store.history) == history_before

    def test_invalid_name_leaves_state_untouched(self, store):
        result = store.add_topic("A")
        assert not result.success
        assert result.error == "Topic name must be at least 2 characters"
        assert store.graph.is_empty()
        assert not store.can_undo()

    def test_rename_to_own_name_with_other_case(self, sample_store):
        """Renaming never collides with the entity itself."""
        result = sample_store.rename_topic("t-arrays", "ARRAYS")
        assert result.success
        assert sample_store.graph.find_topic("t-arrays").name == "ARRAYS"

    def test_rename_collision(self, sample_store):
        result = sample_store.rename_topic("t-arrays", "graphs")
        assert not result.success
        assert result.error == "Topic name already exists"

    def test_rename_missing_topic_is_not_found(self, store):
        result = store.rename_topic("nope", "Something")
        assert result.success is False
        assert result.not_found is True
        assert result.error == "Topic not found"

    def test_delete_topic_cascades(self, store):
        """Deleting a topic with 3+2 questions removes 8 entities; undo restores them."""
        topic_id = add(store, store.add_topic("Arrays"))
        first = add(store, store.add_sub_topic(topic_id, "Basics"))
        second = add(store, store.add_sub_topic(topic_id, "Advanced"))
        for title in ("Two Sum", "Three Sum", "Four Sum"):
            add(store, store.add_question(first, title))
        for title in ("Trapping Rain Water", "Median of Arrays"):
            add(store, store.add_question(second, title))
        before = tree(store)

        assert store.delete_topic(topic_id).success

        graph = store.graph
        assert graph.topic_count() == 0
        assert graph.sub_topic_count() == 0
        assert graph.question_count() == 0
        assert store.can_undo()

        assert store.undo()
        assert graph.topic_count() + graph.sub_topic_count() + graph.question_count() == 8
        assert tree(store) == before

    def test_delete_missing_topic(self, store):
        result = store.delete_topic("missing")
        assert result.not_found
        assert not store.can_undo()


class TestSubTopics:
    """Sub-topic create, rename, delete."""

    def test_add_sub_topic_to_topic(self, sample_store):
        sub_id = add(sample_store, sample_store.add_sub_topic("t-graphs", "DFS"))
        topic = sample_store.graph.find_topic("t-graphs")
        assert topic.sub_topic_ids == ["s-bfs", sub_id]
        assert sample_store.graph.find_sub_topic(sub_id).topic_id == "t-graphs"

    def test_sibling_names_scoped_to_topic(self, sample_store):
        """'Basics' exists under Arrays but is free under Graphs."""
        assert sample_store.add_sub_topic("t-graphs", "basics").success
        result = sample_store.add_sub_topic("t-arrays", "basics")
        assert result.error == "Sub-topic name already exists"

    def test_add_sub_topic_unknown_topic(self, sample_store):
        result = sample_store.add_sub_topic("t-none", "DFS")
        assert result.not_found
        assert result.error == "Topic not found"

    def test_rename_sub_topic(self, sample_store):
        assert sample_store.rename_sub_topic("s-bfs", "Breadth First").success
        assert sample_store.get_sub_topic("s-bfs").name == "Breadth First"

    def test_delete_sub_topic_removes_questions(self, sample_store):
        assert sample_store.delete_sub_topic("s-basics").success
        graph = sample_store.graph
        assert graph.find_topic("t-arrays").sub_topic_ids == ["s-advanced"]
        assert graph.find_question("q-two-sum") is None
        assert graph.find_question("q-three-sum") is None
        assert graph.check_invariants() == []


class TestQuestions:
    """Question create, update, delete."""

    def test_add_question_with_attributes(self, sample_store):
        qid = add(
            sample_store,
            sample_store.add_question(
                "s-bfs", "Word Ladder", difficulty="Hard", link="https://leetcode.com/x"
            ),
        )
        question = sample_store.graph.find_question(qid)
        assert question.difficulty is Difficulty.HARD
        assert question.link == "https://leetcode.com/x"
        assert sample_store.graph.find_sub_topic("s-bfs").question_ids[-1] == qid

    def test_add_question_rejects_bad_link(self, sample_store):
        result = sample_store.add_question("s-bfs", "Word Ladder", link="not a url")
        assert result.error == "Invalid URL format"
        assert sample_store.graph.question_count() == 4

    def test_add_question_rejects_bad_difficulty(self, sample_store):
        result = sample_store.add_question("s-bfs", "Word Ladder", difficulty="Extreme")
        assert not result.success
        assert "Difficulty" in result.error

    def test_duplicate_title_within_sub_topic(self, sample_store):
        result = sample_store.add_question("s-basics", "two sum")
        assert result.error == "Question with this title already exists"
        # Same title elsewhere is fine
        assert sample_store.add_question("s-bfs", "Two Sum").success

    def test_update_keeps_unspecified_fields(self, sample_store):
        assert sample_store.update_question("q-two-sum", title="Two Sum II").success
        question = sample_store.graph.find_question("q-two-sum")
        assert question.title == "Two Sum II"
        assert question.difficulty is Difficulty.EASY
        assert question.link == "https://leetcode.com/problems/two-sum/"

    def test_update_empty_string_clears(self, sample_store):
        assert sample_store.update_question("q-two-sum", difficulty="", link="").success
        question = sample_store.graph.find_question("q-two-sum")
        assert question.difficulty is None
        assert question.link is None

    def test_update_failure_is_atomic(self, sample_store):
        """A bad link rejects the whole update, title included."""
        result = sample_store.update_question("q-two-sum", title="Renamed", link="ftp://x")
        assert not result.success
        assert sample_store.graph.find_question("q-two-sum").title == "Two Sum"

    def test_delete_question(self, sample_store):
        assert sample_store.delete_question("q-three-sum").success
        assert sample_store.graph.find_sub_topic("s-basics").question_ids == ["q-two-sum"]
        assert sample_store.delete_question("q-three-sum").not_found


# ─────────────────────────────────────────────────────────────────────────────
# Reorder and move
# ─────────────────────────────────────────────────────────────────────────────


class TestReorder:
    """Move-within-container semantics."""

    def test_reorder_topics(self, store):
        for name in ("Alpha", "Bravo", "Charlie", "Delta"):
            store.add_topic(name)
        assert store.reorder_topics(0, 2).success
        assert topic_names(store) == ["Bravo", "Charlie", "Alpha", "Delta"]
        assert store.reorder_topics(3, 0).success
        assert topic_names(store) == ["Delta", "Bravo", "Charlie", "Alpha"]

    def test_destination_is_clamped(self, store):
        for name in ("Alpha", "Bravo", "Charlie"):
            store.add_topic(name)
        assert store.reorder_topics(0, 99).success
        assert topic_names(store) == ["Bravo", "Charlie", "Alpha"]
        assert store.reorder_topics(2, -5).success
        assert topic_names(store) == ["Alpha", "Bravo", "Charlie"]

    def test_bad_source_index_fails(self, store):
        store.add_topic("Alpha")
        result = store.reorder_topics(5, 0)
        assert not result.success
        assert "out of range" in result.error

    def test_same_position_is_not_recorded(self, sample_store):
        assert sample_store.reorder_topics(1, 1).success
        assert not sample_store.can_undo()

    def test_reorder_questions_and_undo(self, sample_store):
        assert sample_store.reorder_questions("s-basics", 1, 0).success
        ids = sample_store.graph.find_sub_topic("s-basics").question_ids
        assert ids == ["q-three-sum", "q-two-sum"]
        assert sample_store.undo()
        ids = sample_store.graph.find_sub_topic("s-basics").question_ids
        assert ids == ["q-two-sum", "q-three-sum"]

    def test_reorder_sub_topics(self, sample_store):
        assert sample_store.reorder_sub_topics("t-arrays", 0, 1).success
        assert sample_store.graph.find_topic("t-arrays").sub_topic_ids == [
            "s-advanced",
            "s-basics",
        ]


class TestMove:
    """Cross-container moves."""

    def test_move_question_to_front_of_other_sub_topic(self, store):
        """q1 from A=[q1, q2] to B=[q3] at 0 gives A=[q2], B=[q1, q3]."""
        topic = add(store, store.add_topic("Arrays"))
        a = add(store, store.add_sub_topic(topic, "Sub A"))
        b = add(store, store.add_sub_topic(topic, "Sub B"))
        q1 = add(store, store.add_question(a, "Question 1"))
        q2 = add(store, store.add_question(a, "Question 2"))
        q3 = add(store, store.add_question(b, "Question 3"))

        assert store.move_question(q1, a, b, 0).success

        graph = store.graph
        assert graph.find_sub_topic(a).question_ids == [q2]
        assert graph.find_sub_topic(b).question_ids == [q1, q3]
        assert graph.question_owner(q1).id == b
        assert graph.check_invariants() == []

    def test_move_sub_topic_updates_back_reference(self, sample_store):
        assert sample_store.move_sub_topic("s-advanced", "t-arrays", "t-graphs", 0).success
        graph = sample_store.graph
        assert graph.find_topic("t-arrays").sub_topic_ids == ["s-basics"]
        assert graph.find_topic("t-graphs").sub_topic_ids == ["s-advanced", "s-bfs"]
        assert graph.find_sub_topic("s-advanced").topic_id == "t-graphs"
        # Questions travel with their sub-topic
        assert graph.question_owner("q-trap").id == "s-advanced"

    def test_move_index_clamped_to_end(self, sample_store):
        assert sample_store.move_question("q-rotting", "s-bfs", "s-basics", 50).success
        ids = sample_store.graph.find_sub_topic("s-basics").question_ids
        assert ids == ["q-two-sum", "q-three-sum", "q-rotting"]

    def test_stale_source_is_silent_noop(self, sample_store):
        result = sample_store.move_question("q-two-sum", "s-bfs", "s-advanced", 0)
        assert result == MutationResult.ignored()
        assert result.error is None
        assert result.noop
        assert not sample_store.can_undo()
        assert sample_store.graph.question_owner("q-two-sum").id == "s-basics"

    def test_same_container_is_silent_noop(self, sample_store):
        result = sample_store.move_sub_topic("s-bfs", "t-graphs", "t-graphs", 0)
        assert result.noop
        assert not sample_store.can_undo()

    def test_missing_destination_is_not_found(self, sample_store):
        result = sample_store.move_question("q-two-sum", "s-basics", "s-none", 0)
        assert result.not_found
        assert result.error == "Sub-topic not found"

    def test_name_collision_in_destination(self, sample_store):
        sample_store.add_question("s-bfs", "Two Sum")
        result = sample_store.move_question("q-two-sum", "s-basics", "s-bfs", 0)
        assert result.error == "Question with this title already exists"
        assert sample_store.graph.question_owner("q-two-sum").id == "s-basics"


# ─────────────────────────────────────────────────────────────────────────────
# Undo / redo through the store
# ─────────────────────────────────────────────────────────────────────────────


OPERATIONS = {
    "add_topic": lambda s: s.add_topic("Trees"),
    "rename_topic": lambda s: s.rename_topic("t-graphs", "Graph Theory"),
    "delete_topic": lambda s: s.delete_topic("t-arrays"),
    "reorder_topics": lambda s: s.reorder_topics(0, 1),
    "add_sub_topic": lambda s: s.add_sub_topic("t-graphs", "DFS"),
    "rename_sub_topic": lambda s: s.rename_sub_topic("s-basics", "Easy Ones"),
    "delete_sub_topic": lambda s: s.delete_sub_topic("s-advanced"),
    "reorder_sub_topics": lambda s: s.reorder_sub_topics("t-arrays", 1, 0),
    "move_sub_topic": lambda s: s.move_sub_topic("s-bfs", "t-graphs", "t-arrays", 1),
    "add_question": lambda s: s.add_question("s-bfs", "Word Ladder", "Hard"),
    "update_question": lambda s: s.update_question("q-rotting", difficulty="Medium"),
    "delete_question": lambda s: s.delete_question("q-two-sum"),
    "reorder_questions": lambda s: s.reorder_questions("s-basics", 0, 1),
    "move_question": lambda s: s.move_question("q-trap", "s-advanced", "s-basics", 1),
}


class TestUndoRedo:
    """Round-trips and redo invalidation at the store level."""

    @pytest.mark.parametrize("name", sorted(OPERATIONS))
    def test_round_trip(self, sample_store, name):
        before = tree(sample_store)
        assert OPERATIONS[name](sample_store).success
        after = tree(sample_store)
        assert after != before

        assert sample_store.undo()
        assert tree(sample_store) == before
        assert sample_store.redo()
        assert tree(sample_store) == after
        assert sample_store.graph.check_invariants() == []

    def test_divergent_edit_discards_redo(self, sample_store):
        sample_store.add_topic("Trees")
        sample_store.undo()
        sample_store.add_topic("Heaps")
        assert not sample_store.can_redo()
        assert sample_store.redo() is False
        assert "Trees" not in topic_names(sample_store)

    def test_history_bound(self, store):
        for i in range(25):
            store.add_topic(f"Topic {i:02d}")
        steps = 0
        while store.undo():
            steps += 1
        assert steps == 20
        assert len(topic_names(store)) == 5

    def test_history_capacity_configurable(self):
        store = SheetStore(history_capacity=3)
        for i in range(5):
            store.add_topic(f"Topic {i}")
        steps = 0
        while store.undo():
            steps += 1
        assert steps == 3

    def test_expand_toggles_not_recorded(self, sample_store):
        assert sample_store.toggle_topic("t-arrays") is False
        sample_store.collapse_all()
        sample_store.expand_all()
        assert not sample_store.can_undo()

    @pytest.mark.parametrize(
        "edit",
        [
            lambda s: s.rename_topic("t-arrays", "Arrays"),
            lambda s: s.rename_topic("t-arrays", "  Arrays "),
            lambda s: s.rename_sub_topic("s-bfs", "BFS"),
            lambda s: s.update_question("q-two-sum"),
            lambda s: s.update_question("q-rotting", title="Rotting Oranges", difficulty=""),
        ],
    )
    def test_unchanged_edit_not_recorded(self, sample_store, edit):
        """An edit that leaves the sheet as it was adds no undo step."""
        sample_store.add_topic("Trees")
        history_before = len(sample_store.history)

        result = edit(sample_store)

        assert result.success
        assert result.entity_id
        assert len(sample_store.history) == history_before
        assert sample_store.undo()
        assert "Trees" not in topic_names(sample_store)

    def test_history_status(self, sample_store):
        sample_store.add_topic("Trees")
        sample_store.undo()
        status = sample_store.history_status()
        assert status["can_undo"] is False
        assert status["can_redo"] is True
        assert status["capacity"] == 20
        assert status["cursor"] == 0


class TestInvariants:
    """Structural invariants hold across a sequence of edits."""

    def test_mixed_sequence_keeps_graph_consistent(self, fallback_store):
        s = fallback_store
        steps = [
            lambda: s.add_topic("Graphs"),
            lambda: s.move_sub_topic("subtopic-1-2", "topic-1", "topic-2", 0),
            lambda: s.move_question("q-1-1-1", "subtopic-1-1", "subtopic-2-1", 1),
            lambda: s.delete_sub_topic("subtopic-3-1"),
            lambda: s.reorder_topics(4, 0),
            lambda: s.undo(),
            lambda: s.delete_topic("topic-5"),
            lambda: s.undo(),
            lambda: s.redo(),
        ]
        for step in steps:
            step()
            assert s.graph.check_invariants() == []

    def test_check_invariants_reports_dangling_ids(self, sample_store):
        # Corrupt the graph behind the store's back
        sample_store.graph.find_topic("t-arrays").sub_topic_ids.append("s-ghost")
        problems = sample_store.graph.check_invariants()
        assert any("s-ghost" in p for p in problems)


class TestReplaceAll:
    """Whole-sheet replacement used by seeding."""

    def test_replace_all_clears_history(self, sample_store):
        sample_store.add_topic("Trees")
        assert sample_store.replace_all([{"id": "t1", "name": "Only", "subTopics": []}]).success
        assert not sample_store.can_undo()
        assert topic_names(sample_store) == ["Only"]

    def test_empty_hierarchy_rejected(self, sample_store):
        result = sample_store.replace_all([])
        assert not result.success
        assert topic_names(sample_store) == ["Arrays", "Graphs"]

    def test_stale_generation_dropped(self, store):
        old = store.begin_seed()
        new = store.begin_seed()
        assert store.replace_all([{"name": "Late", "subTopics": []}], generation=old).noop
        assert store.graph.is_empty()
        assert store.replace_all([{"name": "Fresh", "subTopics": []}], generation=new).success
        assert topic_names(store) == ["Fresh"]

    def test_repeated_ids_get_fresh_ones(self, store):
        topics = [
            {"id": "dup", "name": "One", "subTopics": [{"id": "dup", "name": "Inner"}]},
            {"id": "dup", "name": "Two", "subTopics": []},
        ]
        assert store.replace_all(topics).success
        assert store.graph.topic_count() == 2
        assert store.graph.sub_topic_count() == 1
        assert store.graph.check_invariants() == []

    def test_loaded_entities_start_expanded(self, sample_store):
        assert sample_store.is_topic_expanded("t-graphs")
        assert sample_store.is_sub_topic_expanded("s-bfs")

    def test_reset_empties_store(self, sample_store):
        sample_store.add_topic("Trees")
        sample_store.reset()
        assert sample_store.needs_seed()
        assert not sample_store.can_undo()
