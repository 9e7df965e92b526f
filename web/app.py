"""
N-gram Text Generation Web API

A Flask application for building transition tables in the background and
querying predictions and generated text over JSON.
"""

import logging
import threading
from typing import Dict, Optional

from flask import Flask, current_app, jsonify, request

from wordchain.config import ModelConfig
from wordchain.corpus import ID_RULES, load_directory, load_state_union
from wordchain.errors import UnknownContextError
from wordchain.generator import generate
from wordchain.model import TransitionTable, build_transition_table


logger = logging.getLogger(__name__)


class DashboardState:
    """The current table and build status of one application."""

    def __init__(self, table: Optional[TransitionTable] = None):
        self.table = table
        self.lock = threading.Lock()
        self.thread: Optional[threading.Thread] = None
        self.status: Dict = {
            'is_training': False,
            'stage': 'idle',
            'message': '',
            'error': None,
            'stats': table.stats if table is not None else None
        }

    def update(self, **fields):
        with self.lock:
            self.status.update(fields)


def get_state() -> DashboardState:
    return current_app.extensions['wordchain']


def train_model_async(state: DashboardState, config: ModelConfig,
                      corpus_dir: Optional[str] = None,
                      state_union: bool = False) -> None:
    """Load a corpus and build a table; meant to run in a background thread."""
    try:
        state.update(stage='loading', message='Loading corpus...')

        if state_union:
            corpus = load_state_union(lowercase=config.lowercase)
        else:
            corpus = load_directory(
                corpus_dir,
                pattern=config.pattern,
                id_rule=ID_RULES[config.id_rule],
                lowercase=config.lowercase,
                encoding=config.encoding
            )

        year_filter = config.year_filter()
        if year_filter is not None:
            corpus = corpus.select(year_filter)

        state.update(
            stage='building',
            message=f'Counting n-grams in {corpus.stats["total_tokens"]:,} tokens'
        )

        table = build_transition_table(
            corpus, order=config.order, cross_documents=config.cross_documents
        )

        stats = dict(corpus.stats)
        stats.update(table.stats)

        with state.lock:
            state.table = table
            state.status.update(
                is_training=False,
                stage='complete',
                message='Build complete!',
                stats=stats
            )

    except Exception as e:
        logger.exception("Table build failed")
        state.update(is_training=False, stage='error',
                     message=f'Error: {e}', error=str(e))


def parse_context(text: str, table: TransitionTable):
    """Split context text and fold it to the case setting of the table."""
    return table.normalize(text.split() if text else [])


def create_app(config: Optional[ModelConfig] = None,
               table: Optional[TransitionTable] = None) -> Flask:
    """
    Create the web application.

    Args:
        config: Default model configuration for builds
        table: Optional pre-built table to serve immediately
    """
    app = Flask(__name__)
    app.config['MODEL_CONFIG'] = config or ModelConfig()
    app.config['MAX_GENERATE_LENGTH'] = 500
    app.extensions['wordchain'] = DashboardState(table)

    @app.errorhandler(UnknownContextError)
    def unknown_context(e):
        return jsonify({'error': str(e), 'context': list(e.context)}), 404

    @app.errorhandler(ValueError)
    def bad_request(e):
        return jsonify({'error': str(e)}), 400

    @app.route('/api/train', methods=['POST'])
    def api_train():
        """Start building a table."""
        state = get_state()
        data = request.get_json(silent=True) or {}

        corpus_dir = data.get('corpus_dir')
        state_union = bool(data.get('state_union', False))
        if not corpus_dir and not state_union:
            return jsonify({'error': 'corpus_dir or state_union is required'}), 400

        overrides = {k: data.get(k) for k in (
            'n', 'lowercase', 'cross_documents', 'min_year', 'max_year',
            'pattern', 'id_rule'
        )}
        overrides['order'] = overrides.pop('n')
        if state_union or data.get('min_year') is not None or data.get('max_year') is not None:
            overrides['id_rule'] = 'year'
        config = app.config['MODEL_CONFIG'].replace(**overrides)

        with state.lock:
            if state.status['is_training']:
                return jsonify({'error': 'Training already in progress'}), 400
            state.status.update(is_training=True, stage='queued',
                                message='Training started', error=None)

        state.thread = threading.Thread(
            target=train_model_async,
            args=(state, config, corpus_dir, state_union)
        )
        state.thread.daemon = True
        state.thread.start()

        return jsonify({'message': 'Training started', 'config': config.to_dict()})

    @app.route('/api/status')
    def api_status():
        """Get build status."""
        state = get_state()
        with state.lock:
            return jsonify(state.status)

    @app.route('/api/model/info')
    def api_model_info():
        """Get table information."""
        table = get_state().table
        if table is None:
            return jsonify({'error': 'No model trained'}), 400
        return jsonify(table.stats)

    @app.route('/api/top_words')
    def api_top_words():
        """Get the most frequent n-grams of the table."""
        table = get_state().table
        if table is None:
            return jsonify({'error': 'No model trained'}), 400

        k = request.args.get('k', 20, type=int)
        return jsonify([
            {'ngram': list(ngram), 'count': count}
            for ngram, count in table.top_ngrams(k)
        ])

    @app.route('/api/predict')
    def api_predict():
        """Get next-word probabilities for a context."""
        table = get_state().table
        if table is None:
            return jsonify({'error': 'No model trained'}), 400

        words = parse_context(request.args.get('context', ''), table)
        k = request.args.get('k', 10, type=int)

        width = table.order - 1
        if len(words) < width:
            raise ValueError(f"Need at least {width} context words")
        context = tuple(words[len(words) - width:])

        return jsonify({
            'context': list(context),
            'predictions': [
                {'word': word, 'probability': prob}
                for word, prob in table.most_likely(context, top_k=k)
            ]
        })

    @app.route('/api/generate', methods=['POST'])
    def api_generate():
        """Generate text from the table."""
        table = get_state().table
        if table is None:
            return jsonify({'error': 'No model trained'}), 400

        data = request.get_json(silent=True) or {}
        config = app.config['MODEL_CONFIG']
        words = parse_context(data.get('context', ''), table)
        length = min(int(data.get('length', config.length)),
                     app.config['MAX_GENERATE_LENGTH'])
        seed = data.get('seed', config.seed)

        width = table.order - 1
        if words:
            if len(words) < width:
                raise ValueError(f"Need at least {width} context words")
            context = tuple(words[len(words) - width:])
        else:
            context = table.most_common_context()

        generated = list(generate(table, context, length=length, seed=seed))

        return jsonify({
            'context': list(context),
            'generated': generated,
            'text': ' '.join(generated)
        })

    return app

