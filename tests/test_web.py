import inspect

import pytest

import web.app
from web.app import create_app
from wordchain.config import ModelConfig


@pytest.fixture
def client(cycle_table):
    app = create_app(ModelConfig(length=10, seed=3), table=cycle_table)
    app.testing = True
    return app.test_client()


@pytest.fixture
def empty_app():
    app = create_app()
    app.testing = True
    return app


def test_model_info(client):
    response = client.get('/api/model/info')
    assert response.status_code == 200
    assert response.get_json()['n'] == 2


def test_endpoints_without_model(empty_app):
    client = empty_app.test_client()
    assert client.get('/api/model/info').status_code == 400
    assert client.get('/api/predict?context=the').status_code == 400
    assert client.post('/api/generate', json={}).status_code == 400


def test_predict(client):
    data = client.get('/api/predict?context=sat+on&k=5').get_json()
    assert data['context'] == ['on']
    assert data['predictions'] == [{'word': 'the', 'probability': 1.0}]


def test_predict_unknown_context_is_404(client):
    response = client.get('/api/predict?context=dog')
    assert response.status_code == 404
    assert response.get_json()['context'] == ['dog']


def test_predict_needs_context(client):
    assert client.get('/api/predict').status_code == 400


def test_generate_is_reproducible(client):
    first = client.post('/api/generate', json={'context': 'the', 'length': 12}).get_json()
    second = client.post('/api/generate', json={'context': 'the', 'length': 12}).get_json()
    assert first['generated'] == second['generated']
    assert len(first['generated']) == 12
    assert first['text'] == ' '.join(first['generated'])


def test_generate_defaults(client):
    data = client.post('/api/generate', json={}).get_json()
    assert data['context'] == ['the']
    assert len(data['generated']) == 10


def test_generate_bad_length(client):
    assert client.post('/api/generate', json={'length': -3}).status_code == 400


def test_top_words(client):
    data = client.get('/api/top_words?k=1').get_json()
    assert data == [{'ngram': ['the', 'cat'], 'count': 2}]


def test_train_in_background(empty_app, speech_dir):
    client = empty_app.test_client()
    response = client.post('/api/train', json={
        'corpus_dir': str(speech_dir), 'n': 3, 'lowercase': True,
        'id_rule': 'year', 'min_year': 1950
    })
    assert response.status_code == 200
    assert response.get_json()['config']['id_rule'] == 'year'

    empty_app.extensions['wordchain'].thread.join(timeout=10)

    status = client.get('/api/status').get_json()
    assert status['stage'] == 'complete'
    assert status['stats']['n'] == 3
    assert client.get('/api/model/info').get_json()['n'] == 3


def test_train_failure_is_reported(empty_app, tmp_path):
    client = empty_app.test_client()
    client.post('/api/train', json={'corpus_dir': str(tmp_path / "missing")})
    empty_app.extensions['wordchain'].thread.join(timeout=10)

    status = client.get('/api/status').get_json()
    assert status['stage'] == 'error'
    assert status['is_training'] is False
    assert status['error']


def test_train_needs_a_source(empty_app):
    assert empty_app.test_client().post('/api/train', json={}).status_code == 400


def test_unexpected_build_error_releases_training(empty_app, speech_dir, monkeypatch):
    def broken_loader(*args, **kwargs):
        raise LookupError("resource missing")

    monkeypatch.setattr(web.app, "load_directory", broken_loader)
    client = empty_app.test_client()
    state = empty_app.extensions['wordchain']

    assert client.post('/api/train', json={'corpus_dir': str(speech_dir)}).status_code == 200
    state.thread.join(timeout=10)

    status = client.get('/api/status').get_json()
    assert status['stage'] == 'error'
    assert status['is_training'] is False
    assert 'resource missing' in status['error']

    assert client.post('/api/train', json={'corpus_dir': str(speech_dir)}).status_code == 200
    state.thread.join(timeout=10)


def test_lowercase_build_folds_request_context(empty_app, speech_dir):
    client = empty_app.test_client()
    client.post('/api/train', json={'corpus_dir': str(speech_dir), 'lowercase': True})
    empty_app.extensions['wordchain'].thread.join(timeout=10)

    response = client.get('/api/predict?context=The')
    assert response.status_code == 200
    assert response.get_json()['context'] == ['the']

    generated = client.post('/api/generate', json={'context': 'The', 'length': 3, 'seed': 1})
    assert generated.status_code == 200
    assert generated.get_json()['context'] == ['the']


@pytest.mark.parametrize("payload", [
    {'n': '3'},
    {'lowercase': 'yes'},
    {'min_year': '1950'},
])
def test_train_rejects_mistyped_settings(empty_app, speech_dir, payload):
    client = empty_app.test_client()
    response = client.post('/api/train', json=dict(payload, corpus_dir=str(speech_dir)))

    assert response.status_code == 400
    assert client.get('/api/status').get_json()['is_training'] is False


@pytest.mark.parametrize("url", [
    '/api/top_words?k=0',
    '/api/top_words?k=-5',
    '/api/predict?context=the&k=0',
])
def test_non_positive_k_is_rejected(client, url):
    assert client.get(url).status_code == 400


def test_app_module_has_no_script_entry_point():
    assert "__main__" not in inspect.getsource(web.app)
