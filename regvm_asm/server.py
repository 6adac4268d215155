"""
regvm Assembler - Flask Backend

Provides REST API endpoints for assembling source text or uploaded files
and for switching the active target profile.
"""

import os

from flask import Flask, jsonify, request
from werkzeug.utils import secure_filename

from .assembler import OUTPUT_FORMATS, Assembler
from .errors import AssemblerError
from .resolver import program_size
from .target import Target, TargetError, default_target, get_target_summary, parse_target


app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1MB max upload
app.config['DEBUG'] = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'

# Global state
_target: Target | None = None


def get_target() -> Target:
    global _target
    if _target is None:
        _target = default_target()
    return _target


def error_response(error: str, message: str, status: int = 400) -> tuple:
    """Create a standardized error response."""
    return jsonify({'error': error, 'message': message}), status


def require_file_upload() -> tuple | None:
    """Validate file upload and return error response if invalid, None if valid."""
    if 'file' not in request.files:
        return error_response('No file provided', 'Request must include a file field')
    if request.files['file'].filename == '':
        return error_response('No file selected', 'File field is empty')
    return None


@app.after_request
def add_cors_headers(response):
    """Add CORS headers to all responses for local development."""
    response.headers['Access-Control-Allow-Origin'] = '*'
    response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
    response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
    return response


@app.errorhandler(400)
def bad_request(error):
    return error_response('Bad request', str(error.description), 400)


@app.errorhandler(404)
def not_found(error):
    return error_response('Not found', str(error.description), 404)


@app.errorhandler(500)
def internal_error(error):
    return error_response('Internal server error', str(error.description), 500)


def _json_body() -> dict:
    """The JSON request body, or an empty dict when it is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _read_source() -> tuple:
    """
    Read the source from a multipart upload or a JSON body.

    Returns:
        (filename, source, None) on success, (None, None, error_response) otherwise
    """
    if request.files:
        file_error = require_file_upload()
        if file_error:
            return None, None, file_error
        file = request.files['file']
        filename = secure_filename(file.filename) or 'upload.asm'
        try:
            return filename, file.read().decode('utf-8'), None
        except UnicodeDecodeError as e:
            return None, None, error_response('Invalid source file', f'File is not UTF-8: {e}')

    data = _json_body()
    if not isinstance(data.get('source'), str):
        return None, None, error_response(
            'No source provided',
            'Send JSON with a "source" string or upload a file field'
        )
    return str(data.get('filename') or '<source>'), data['source'], None


@app.route('/api/assemble', methods=['POST', 'OPTIONS'])
def assemble():
    """Assemble source text and return the token stream."""
    if request.method == 'OPTIONS':
        return '', 204

    filename, source, read_error = _read_source()
    if read_error:
        return read_error

    fmt = request.args.get('format') or request.form.get('format')
    if fmt is None:
        fmt = _json_body().get('format', 'text')
    if fmt not in OUTPUT_FORMATS:
        return error_response(
            'Invalid format',
            f"Format must be one of: {', '.join(OUTPUT_FORMATS)}"
        )

    asm = Assembler(target=get_target())
    try:
        asm.assemble_string(source)
        output = asm.render(fmt)
    except (AssemblerError, TargetError) as e:
        return error_response('Assembly failed', str(e))

    if isinstance(output, bytes):
        output = output.hex()

    return jsonify({
        'success': True,
        'filename': filename,
        'format': fmt,
        'output': output,
        'labels': asm.symbols,
        'size': program_size(asm.program),
        'instructions': len(asm.encoded),
        'listing': asm.get_listing(),
    })


@app.route('/api/target', methods=['POST', 'OPTIONS'])
def load_target_profile():
    """Upload and activate a target profile."""
    global _target

    if request.method == 'OPTIONS':
        return '', 204

    file_error = require_file_upload()
    if file_error:
        return file_error

    try:
        yaml_content = request.files['file'].read().decode('utf-8')
        _target = parse_target(yaml_content)
    except TargetError as e:
        return error_response('Invalid target profile', str(e))
    except UnicodeDecodeError as e:
        return error_response('Invalid target profile', f'File is not UTF-8: {e}')

    return jsonify({'success': True, 'summary': get_target_summary(_target)})


@app.route('/api/target', methods=['GET'])
def get_current_target():
    """Get the active target profile."""
    return jsonify({'summary': get_target_summary(get_target())})


def main():
    # Get port from environment or default to 5050 (5000 is often used by macOS AirPlay)
    port = int(os.environ.get('PORT', 5050))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'

    print(f"Starting regvm assembler service on port {port}")
    print(f"Debug mode: {debug}")

    app.run(host='0.0.0.0', port=port, debug=debug)


if __name__ == '__main__':
    main()
