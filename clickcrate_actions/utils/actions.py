"""Helpers for shaping Solana Actions (Blinks) responses."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify

ACTION_VERSION = "2.1.3"

BLOCKCHAIN_IDS = {
    "mainnet": "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp",
    "devnet": "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1",
}

ACTIONS_CORS_OPTIONS: Dict[str, Any] = {
    "origins": "*",
    "methods": ["GET", "POST", "PUT", "OPTIONS"],
    "allow_headers": [
        "Content-Type",
        "Authorization",
        "Content-Encoding",
        "Accept-Encoding",
        "X-Action-Version",
        "X-Blockchain-Ids",
    ],
    "expose_headers": ["X-Action-Version", "X-Blockchain-Ids"],
}

CREATOR_ICON = (
    "https://shdw-drive.genesysgo.net/CiJnYeRgNUptSKR4MmsAPn7Zhp6LSv91ncWTuNqDLo7T/"
    "horizontalmerchcreatoricon.png"
)
POS_PLACEHOLDER_ICON = (
    "https://shdw-drive.genesysgo.net/3CjrSiTMjg73qjNb9Phpd54sT2ZNXM6YmUudRHvwwppx/"
    "clickcrate%20pos%20placeholder.svg"
)
STOREFRONT_ICON = (
    "https://shdw-drive.genesysgo.net/3CjrSiTMjg73qjNb9Phpd54sT2ZNXM6YmUudRHvwwppx/"
    "clickcrate_storefront.svg"
)


def blockchain_ids() -> str:
    """Return the X-Blockchain-Ids header value for the configured cluster."""
    cluster = os.getenv("SOLANA_CLUSTER", "devnet").lower()
    return BLOCKCHAIN_IDS.get(cluster, BLOCKCHAIN_IDS["devnet"])


def register_action_headers(app: Flask) -> None:
    """Stamp the Actions version headers on every response."""

    @app.after_request
    def _add_action_headers(response):
        response.headers["X-Action-Version"] = ACTION_VERSION
        response.headers["X-Blockchain-Ids"] = blockchain_ids()
        return response


def action_response(body: Dict[str, Any], status: int = 200):
    """Return a JSON response tuple for an Actions payload."""
    return jsonify(body), status


def parameter(
    name: str,
    label: str,
    *,
    type_: Optional[str] = None,
    required: bool = True,
    options: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Build one linked-action input parameter."""
    param: Dict[str, Any] = {"name": name, "label": label, "required": required}
    if type_ is not None:
        param["type"] = type_
    if options is not None:
        param["options"] = options
    return param


def completed_action(icon: str, label: str, title: str, description: str) -> Dict[str, Any]:
    """Build the terminal ``completed`` action shown after a flow finishes."""
    return {
        "type": "completed",
        "icon": icon,
        "label": label,
        "title": title,
        "description": description,
    }


def inline_next(action: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap an action as the inline ``links.next`` of a POST response."""
    return {"next": {"type": "inline", "action": action}}
