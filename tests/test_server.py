"""
Tests for the Flask API.
"""

import io

import pytest
import yaml

from regvm_asm import server
from regvm_asm.target import DEFAULT_TARGET_PATH


SRC = ".main:\n    mov r0, 0\n.loop:\n    inc r0\n    b .loop\n"


@pytest.fixture
def client():
    server.app.config['TESTING'] = True
    server._target = None
    with server.app.test_client() as client:
        yield client
    server._target = None


def _target_upload(**overrides):
    data = yaml.safe_load(DEFAULT_TARGET_PATH.read_text(encoding='utf-8'))
    data.update(overrides)
    return {'file': (io.BytesIO(yaml.safe_dump(data).encode('utf-8')), 'target.yaml')}


class TestAssemble:
    """Tests for POST /api/assemble."""

    def test_json_source(self, client):
        response = client.post('/api/assemble', json={'source': SRC})
        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is True
        assert body['format'] == 'text'
        assert body['output'] == "Op.MOV_CONST, 0, 0,\nOp.INC, 0,\nOp.BRANCH_CONST, 3,\n"
        assert body['labels'] == {'main': 0, 'loop': 3}
        assert body['size'] == 7
        assert body['instructions'] == 3

    def test_file_upload(self, client):
        response = client.post(
            '/api/assemble',
            data={'file': (io.BytesIO(SRC.encode('utf-8')), '../prog one.asm'),
                  'format': 'numeric'},
            content_type='multipart/form-data',
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body['filename'] == 'prog_one.asm'
        assert body['output'] == "2, 0, 0,\n20, 0,\n12, 3,\n"

    def test_binary_is_hex(self, client):
        response = client.post('/api/assemble?format=binary', json={'source': SRC})
        body = response.get_json()
        assert body['output'].startswith('02000000')
        assert len(body['output']) == 7 * 4 * 2

    def test_assembly_error(self, client):
        response = client.post('/api/assemble', json={'source': ".main:\n    b .nowhere\n"})
        assert response.status_code == 400
        body = response.get_json()
        assert body['error'] == 'Assembly failed'
        assert "Undefined label 'nowhere'" in body['message']

    def test_missing_source(self, client):
        response = client.post('/api/assemble', json={})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No source provided'

    def test_null_filename_still_assembles(self, client):
        response = client.post(
            '/api/assemble', json={'source': ".main:\n    inc r0\n", 'filename': None}
        )
        assert response.status_code == 200
        assert response.mimetype == 'application/json'
        body = response.get_json()
        assert body['filename'] == '<source>'
        assert body['output'] == "Op.INC, 0,\n"

    def test_numeric_filename_becomes_string(self, client):
        body = client.post('/api/assemble', json={'source': SRC, 'filename': 7}).get_json()
        assert body['filename'] == '7'

    @pytest.mark.parametrize("payload", [['x'], 'x', 42, True])
    def test_json_body_must_be_object(self, client, payload):
        response = client.post('/api/assemble', json=payload)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No source provided'

    def test_invalid_format(self, client):
        response = client.post('/api/assemble', json={'source': SRC, 'format': 'hex'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid format'

    def test_cors_headers(self, client):
        response = client.post('/api/assemble', json={'source': SRC})
        assert response.headers['Access-Control-Allow-Origin'] == '*'


class TestTarget:
    """Tests for /api/target."""

    def test_default_target(self, client):
        response = client.get('/api/target')
        assert response.status_code == 200
        assert response.get_json()['summary']['name'] == 'default'

    def test_upload_target_changes_output(self, client):
        response = client.post(
            '/api/target',
            data=_target_upload(name='custom', selector_prefix=''),
            content_type='multipart/form-data',
        )
        assert response.status_code == 200
        assert response.get_json()['summary']['name'] == 'custom'

        body = client.post('/api/assemble', json={'source': SRC}).get_json()
        assert body['output'].startswith('MOV_CONST, 0, 0,')

    def test_invalid_target(self, client):
        response = client.post(
            '/api/target',
            data=_target_upload(word_size=3),
            content_type='multipart/form-data',
        )
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid target profile'

    def test_upload_requires_file(self, client):
        response = client.post('/api/target', data={}, content_type='multipart/form-data')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No file provided'
