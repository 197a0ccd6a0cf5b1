from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

bp = Blueprint("words", __name__)


@bp.get("/words")
def get_words():
    registry = current_app.extensions["doodleduel"]
    try:
        count = int(request.args.get("count", str(registry.settings.word_choices_count)))
    except ValueError:
        count = registry.settings.word_choices_count
    count = max(1, min(count, 20))

    return jsonify({"words": registry.word_bank.pick_choices(count)})
