"""HTTP relay between the browser and the upstream LLM API."""

import logging

from flask import jsonify, request

logger = logging.getLogger(__name__)

UPSTREAM_ERRORS = {
    401: "Invalid API key. Please check your API key.",
    429: "Rate limit exceeded. Please try again later.",
}
GENERIC_ERROR = "Failed to get AI response. Please try again."


def register_routes(app):
    server = app.server

    @server.post("/api/chat")
    def chat():
        payload = request.get_json(silent=True)
        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, str) or not message.strip():
            return jsonify(error="Message is required"), 400

        try:
            raw_response = app.llm.generate_response(app.llm.build_messages(message))
            ai_content = app.llm.extract_content(raw_response)
        except Exception as e:
            status = getattr(e, "status_code", None)
            logger.error("Upstream API error (%s): %s", status, e)
            if status in UPSTREAM_ERRORS:
                return jsonify(error=UPSTREAM_ERRORS[status]), status
            return jsonify(error=GENERIC_ERROR), 500

        return jsonify(response=ai_content)

    @server.get("/api/health")
    def health():
        return jsonify(status="OK", message="Quanta server is running")
