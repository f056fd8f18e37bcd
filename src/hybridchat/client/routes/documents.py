"""Read-only API over the searchable documents."""

import json
import logging

from flask import Blueprint, jsonify

from hybridchat.client.routes.config import get_config

logger = logging.getLogger(__name__)

documents_bp = Blueprint("documents", __name__)


@documents_bp.route("/api/documents", methods=["GET"])
def list_documents():
    """List the searchable documents with their sizes."""
    gateway = get_config().gateway
    if gateway is None:
        return jsonify({"error": "Document gateway not initialized", "retryable": False}), 500

    documents = gateway.list_documents()
    logger.info(f"📂 Listing {len(documents)} documents")
    return jsonify({"count": len(documents), "documents": documents})


@documents_bp.route("/api/document/<path:filename>", methods=["GET"])
def get_document(filename: str):
    """Return one searchable document, or 404 naming the file."""
    gateway = get_config().gateway
    if gateway is None:
        return jsonify({"error": "Document gateway not initialized", "retryable": False}), 500

    result = gateway.execute("get_document", {"filename": filename})
    body = json.loads(result.content)
    if result.is_error:
        logger.warning(f"⚠️ Document not found: {filename}")
        return jsonify(body), 404
    return jsonify(body)
