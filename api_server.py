#!/usr/bin/env python3
"""
Raster Editor API Server
Each menu action of the editor has its own API endpoint; the frontend only
renders the two previews and enables actions from the returned flags.
"""

import os
import logging
from io import BytesIO

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from models.errors import DecodeError, EncodeError, InvalidActionError, UnknownOperationError
from services.editor_service import EditorService

logger = logging.getLogger(__name__)

# Configuration
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "5000"))


def create_app(editor: EditorService = None) -> Flask:
    """Build the Flask app around a single editor session."""
    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend communication
    app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH
    app.extensions['editor'] = editor or EditorService()

    def get_editor() -> EditorService:
        return app.extensions['editor']

    def state_response(message: str = None, status: int = 200):
        editor = get_editor()
        image_service = editor.image_service
        body = {
            'success': True,
            'state': editor.state(),
            'original': image_service.to_data_url(editor.session.original),
            'derived': image_service.to_data_url(editor.session.derived),
        }
        if message:
            body['message'] = message
        return jsonify(body), status

    def error_response(message: str, status: int):
        return jsonify({'success': False, 'message': message}), status

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'message': 'Raster Editor API is running',
            'has_image': get_editor().session.has_image,
        })

    @app.route('/api/state', methods=['GET'])
    def get_state():
        """Action flags plus original/derived previews."""
        return state_response()

    @app.route('/api/image', methods=['POST'])
    def open_image():
        """Open an uploaded image as the new original."""
        if 'image' not in request.files:
            return error_response('No image provided', 400)

        file = request.files['image']
        if file.filename == '':
            return error_response('No file selected', 400)

        editor = get_editor()
        filename = secure_filename(file.filename)
        if not editor.image_service.is_allowed_file(filename):
            return error_response(f'File type not allowed: {filename}', 400)

        editor.open_image(file.read(), filename)
        return state_response(f'Loaded {filename}')

    @app.route('/api/image', methods=['DELETE'])
    def remove_image():
        """Remove the image and any changes."""
        get_editor().remove_image()
        return state_response('Image removed')

    @app.route('/api/changes', methods=['DELETE'])
    def remove_changes():
        """Drop the derived image, keeping the original."""
        get_editor().remove_changes()
        return state_response('Changes removed')

    @app.route('/api/transform/<operation>', methods=['POST'])
    def apply_transform(operation):
        """Apply one geometric transform or filter to the original image."""
        get_editor().apply(operation)
        return state_response(f'Applied {operation}')

    @app.route('/api/export', methods=['GET'])
    def export_image():
        """Download the derived image."""
        editor = get_editor()
        data = editor.export()
        logger.info(f"Exporting {editor.export_filename} ({len(data)} bytes)")
        return send_file(
            BytesIO(data),
            mimetype='image/png',
            as_attachment=True,
            download_name=editor.export_filename,
        )

    @app.errorhandler(DecodeError)
    def decode_failed(e):
        logger.error(f"Image loading error: {e}")
        return error_response(f'Error loading image: {e.message}', 400)

    @app.errorhandler(EncodeError)
    def encode_failed(e):
        logger.error(f"Image export error: {e}")
        return error_response(f'Error exporting image: {e.message}', 500)

    @app.errorhandler(InvalidActionError)
    def invalid_action(e):
        return error_response(str(e), 409)

    @app.errorhandler(UnknownOperationError)
    def unknown_operation(e):
        return error_response(str(e), 404)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        """Handle file too large error."""
        return error_response(f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.', 413)

    return app


def main():
    app = create_app()
    logger.info(f"Starting Raster Editor API on {API_HOST}:{API_PORT}")
    logger.info(f"Max upload size: {MAX_CONTENT_LENGTH // (1024 * 1024)}MB")
    logger.info(f"Operations: {', '.join(app.extensions['editor'].operations)}")
    # One request at a time: the editor session is not shared across threads
    app.run(host=API_HOST, port=API_PORT, debug=False, threaded=False)


if __name__ == '__main__':
    main()
