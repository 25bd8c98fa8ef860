"""Flask server that exposes plain-dump restoration as a tiny web API."""
from __future__ import annotations

import io
import logging
from typing import Dict

from flask import Flask, jsonify, request, send_file

from .errors import MalformedInputError
from .pgm_writer import EXPORT_FORMATS, render
from .restoration import RestorationEngine

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 64 * 1024 * 1024

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/restore")
def api_restore():
    file = request.files.get("corrupted")
    if not file or file.filename == "":
        return jsonify({"error": "Please choose a corrupted plain file."}), 400

    export_fmt = request.form.get("format", "pgm").lower()
    if export_fmt not in EXPORT_FORMATS:
        return jsonify({"error": "Unsupported export format."}), 400

    payload = file.read()
    if not payload:
        return jsonify({"error": "The uploaded file is empty."}), 400

    try:
        result = RestorationEngine(io.BytesIO(payload)).run()
        if result is None:
            return jsonify({"error": "No repeating row signature; nothing to restore."}), 400
        buffer = render(result.rows, result.width, export_fmt)
    except MalformedInputError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:  # noqa: BLE001
        logger.exception("Restoration failed")
        return jsonify({"error": "Failed to restore the image."}), 500

    response = send_file(
        buffer,
        mimetype=EXPORT_FORMATS[export_fmt]["mime"],
        download_name=f"restored.{export_fmt}",
    )
    for key, value in result.stats.to_headers():
        response.headers[key] = value
    return response


if __name__ == "__main__":
    app.run(debug=True)
