"""qsheet.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: all logic delegates to SheetStore. No graph
logic is duplicated here.

State pattern:
    _state = {"store": store, "storage": storage, "config": config, "lock": RLock()}

Failed edits answer 400, missing ids 404. Committed edits (and undo/redo)
are written through the storage adapter when one is configured.

The development server handles requests on several threads, so every
request holds ``_state["lock"]`` from start to finish. Edits, their
history records and the save that follows never interleave.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from flask import Flask, jsonify, request
from flask_cors import CORS

from qsheet.sheet.store import MutationResult, SheetStore
from qsheet.sheet.view import tree_to_dicts
from qsheet.storage import JsonFileStorage

logger = logging.getLogger(__name__)


def _int_arg(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.lstrip("-").isdigit():
        return int(value)
    return None


def create_app(
    store: SheetStore,
    config: dict[str, Any],
    storage: JsonFileStorage | None = None,
) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        store: The sheet store to serve.
        config: qsheet configuration dict.
        storage: Optional adapter; when given, every committed change is saved.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    CORS(app)

    _state: dict[str, Any] = {
        "store": store,
        "storage": storage,
        "config": config,
        "lock": threading.RLock(),
    }
    app.extensions["qsheet"] = _state

    @app.before_request
    def _acquire_lock() -> None:
        _state["lock"].acquire()

    @app.teardown_request
    def _release_lock(exc: BaseException | None) -> None:
        _state["lock"].release()

    def _persist() -> None:
        if _state["storage"] is not None:
            _state["storage"].save_store(_state["store"])

    def _respond(result: MutationResult):
        """Translate a MutationResult into a JSON response."""
        payload = result.to_dict()
        payload["history"] = _state["store"].history_status()
        if result.success:
            _persist()
            return jsonify(payload), 200
        if result.noop:
            return jsonify(payload), 200
        return jsonify(payload), 404 if result.not_found else 400

    def _body() -> dict[str, Any]:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def _require(data: dict[str, Any], *keys: str):
        missing = [k for k in keys if data.get(k) in (None, "")]
        if missing:
            return jsonify({"success": False, "error": f"{', '.join(missing)} required"}), 400
        wrong = [k for k in keys if not isinstance(data[k], str)]
        if wrong:
            error = f"{', '.join(wrong)} must be a string"
            return jsonify({"success": False, "error": error}), 400
        return None

    def _with_indices(data: dict[str, Any], call: Callable[[int, int], MutationResult]):
        source = _int_arg(data, "source_index")
        destination = _int_arg(data, "destination_index")
        if source is None or destination is None:
            return jsonify(
                {"success": False, "error": "source_index and destination_index required"}
            ), 400
        return _respond(call(source, destination))

    # ─────────────────────────────────────────────────────────────────
    # Read endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/topics")
    def api_topics():
        """GET /api/topics - Full ordered hierarchy."""
        return jsonify(tree_to_dicts(_state["store"].get_topics()))

    @app.route("/api/topics/<topic_id>")
    def api_topic(topic_id: str):
        """GET /api/topics/<id> - One topic's subtree."""
        view = _state["store"].get_topic(topic_id)
        if view is None:
            return jsonify({"error": "Topic not found"}), 404
        return jsonify(view.to_dict())

    @app.route("/api/subtopics/<sub_topic_id>")
    def api_sub_topic(sub_topic_id: str):
        """GET /api/subtopics/<id> - One sub-topic's subtree."""
        view = _state["store"].get_sub_topic(sub_topic_id)
        if view is None:
            return jsonify({"error": "Sub-topic not found"}), 404
        return jsonify(view.to_dict())

    @app.route("/api/history")
    def api_history():
        """GET /api/history - Undo/redo availability."""
        return jsonify(_state["store"].history_status())

    @app.route("/api/status")
    def api_status():
        """GET /api/status - Entity counts and integrity report."""
        graph = _state["store"].graph
        problems = graph.check_invariants()
        return jsonify(
            {
                "topics": graph.topic_count(),
                "sub_topics": graph.sub_topic_count(),
                "questions": graph.question_count(),
                "consistent": not problems,
                "problems": problems,
            }
        )

    # ─────────────────────────────────────────────────────────────────
    # Topic endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/topics", methods=["POST"])
    def api_add_topic():
        """POST /api/topics - Add a topic. Body: {name}."""
        data = _body()
        return _respond(_state["store"].add_topic(data.get("name", "")))

    @app.route("/api/topics/<topic_id>/rename", methods=["POST"])
    def api_rename_topic(topic_id: str):
        """POST /api/topics/<id>/rename - Body: {name}."""
        data = _body()
        return _respond(_state["store"].rename_topic(topic_id, data.get("name", "")))

    @app.route("/api/topics/<topic_id>/delete", methods=["POST"])
    def api_delete_topic(topic_id: str):
        """POST /api/topics/<id>/delete - Cascade delete."""
        return _respond(_state["store"].delete_topic(topic_id))

    @app.route("/api/topics/reorder", methods=["POST"])
    def api_reorder_topics():
        """POST /api/topics/reorder - Body: {source_index, destination_index}."""
        return _with_indices(_body(), _state["store"].reorder_topics)

    # ─────────────────────────────────────────────────────────────────
    # Sub-topic endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/topics/<topic_id>/subtopics", methods=["POST"])
    def api_add_sub_topic(topic_id: str):
        """POST /api/topics/<id>/subtopics - Body: {name}."""
        data = _body()
        return _respond(_state["store"].add_sub_topic(topic_id, data.get("name", "")))

    @app.route("/api/topics/<topic_id>/subtopics/reorder", methods=["POST"])
    def api_reorder_sub_topics(topic_id: str):
        """POST /api/topics/<id>/subtopics/reorder."""
        store = _state["store"]
        return _with_indices(_body(), lambda s, d: store.reorder_sub_topics(topic_id, s, d))

    @app.route("/api/subtopics/<sub_topic_id>/rename", methods=["POST"])
    def api_rename_sub_topic(sub_topic_id: str):
        data = _body()
        return _respond(_state["store"].rename_sub_topic(sub_topic_id, data.get("name", "")))

    @app.route("/api/subtopics/<sub_topic_id>/delete", methods=["POST"])
    def api_delete_sub_topic(sub_topic_id: str):
        return _respond(_state["store"].delete_sub_topic(sub_topic_id))

    @app.route("/api/subtopics/<sub_topic_id>/move", methods=["POST"])
    def api_move_sub_topic(sub_topic_id: str):
        """POST /api/subtopics/<id>/move.

        Body: {source_topic_id, destination_topic_id, destination_index}.
        """
        data = _body()
        error = _require(data, "source_topic_id", "destination_topic_id")
        if error:
            return error
        index = _int_arg(data, "destination_index")
        if index is None:
            destination = _state["store"].graph.find_topic(data["destination_topic_id"])
            index = len(destination.sub_topic_ids) if destination else 0
        return _respond(
            _state["store"].move_sub_topic(
                sub_topic_id, data["source_topic_id"], data["destination_topic_id"], index
            )
        )

    # ─────────────────────────────────────────────────────────────────
    # Question endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/subtopics/<sub_topic_id>/questions", methods=["POST"])
    def api_add_question(sub_topic_id: str):
        """POST /api/subtopics/<id>/questions - Body: {title, difficulty?, link?}."""
        data = _body()
        return _respond(
            _state["store"].add_question(
                sub_topic_id,
                data.get("title", ""),
                difficulty=data.get("difficulty"),
                link=data.get("link"),
            )
        )

    @app.route("/api/subtopics/<sub_topic_id>/questions/reorder", methods=["POST"])
    def api_reorder_questions(sub_topic_id: str):
        store = _state["store"]
        return _with_indices(_body(), lambda s, d: store.reorder_questions(sub_topic_id, s, d))

    @app.route("/api/questions/<question_id>/update", methods=["POST"])
    def api_update_question(question_id: str):
        """POST /api/questions/<id>/update - Body: any of {title, difficulty, link}."""
        data = _body()
        return _respond(
            _state["store"].update_question(
                question_id,
                title=data.get("title"),
                difficulty=data.get("difficulty"),
                link=data.get("link"),
            )
        )

    @app.route("/api/questions/<question_id>/delete", methods=["POST"])
    def api_delete_question(question_id: str):
        return _respond(_state["store"].delete_question(question_id))

    @app.route("/api/questions/<question_id>/move", methods=["POST"])
    def api_move_question(question_id: str):
        """POST /api/questions/<id>/move.

        Body: {source_sub_topic_id, destination_sub_topic_id, destination_index}.
        """
        data = _body()
        error = _require(data, "source_sub_topic_id", "destination_sub_topic_id")
        if error:
            return error
        index = _int_arg(data, "destination_index")
        if index is None:
            destination = _state["store"].graph.find_sub_topic(data["destination_sub_topic_id"])
            index = len(destination.question_ids) if destination else 0
        return _respond(
            _state["store"].move_question(
                question_id,
                data["source_sub_topic_id"],
                data["destination_sub_topic_id"],
                index,
            )
        )

    # ─────────────────────────────────────────────────────────────────
    # History endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/undo", methods=["POST"])
    def api_undo():
        """POST /api/undo - Step back one edit."""
        if not _state["store"].undo():
            return jsonify({"success": False, "error": "Nothing to undo"}), 400
        _persist()
        return jsonify({"success": True, "history": _state["store"].history_status()})

    @app.route("/api/redo", methods=["POST"])
    def api_redo():
        """POST /api/redo - Step forward one edit."""
        if not _state["store"].redo():
            return jsonify({"success": False, "error": "Nothing to redo"}), 400
        _persist()
        return jsonify({"success": True, "history": _state["store"].history_status()})

    # ─────────────────────────────────────────────────────────────────
    # Expand / collapse endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/expand/topics/<topic_id>", methods=["POST"])
    def api_toggle_topic(topic_id: str):
        expanded = _state["store"].toggle_topic(topic_id)
        _persist()
        return jsonify({"id": topic_id, "expanded": expanded})

    @app.route("/api/expand/subtopics/<sub_topic_id>", methods=["POST"])
    def api_toggle_sub_topic(sub_topic_id: str):
        expanded = _state["store"].toggle_sub_topic(sub_topic_id)
        _persist()
        return jsonify({"id": sub_topic_id, "expanded": expanded})

    @app.route("/api/expand/all", methods=["POST"])
    def api_expand_all():
        _state["store"].expand_all()
        _persist()
        return jsonify({"success": True})

    @app.route("/api/collapse/all", methods=["POST"])
    def api_collapse_all():
        _state["store"].collapse_all()
        _persist()
        return jsonify({"success": True})

    # ─────────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/save", methods=["POST"])
    def api_save():
        """POST /api/save - Write the current sheet to storage."""
        if _state["storage"] is None:
            return jsonify({"success": False, "error": "No storage configured"}), 400
        try:
            _persist()
        except OSError as e:
            logger.error("Saving sheet failed: %s", e)
            return jsonify({"success": False, "error": str(e)}), 500
        return jsonify({"success": True, "path": str(_state["storage"].path)})

    return app
