"""/metadata routes serving hosted NFT metadata."""

from __future__ import annotations

from flask import Blueprint, jsonify

from clickcrate_actions.services import metaplex_service

bp = Blueprint("metadata", __name__, url_prefix="/metadata")


@bp.get("/<metadata_id>")
def get_metadata(metadata_id: str):
    """Return the JSON metadata an NFT's ``uri`` points to."""
    document = metaplex_service.get_metadata(metadata_id)
    if document is None:
        return jsonify(message="Metadata not found."), 404
    return jsonify(document), 200
