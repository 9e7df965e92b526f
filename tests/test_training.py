import pytest

import train
from wordchain.config import ModelConfig
from wordchain.errors import UnknownContextError
from wordchain.model import TransitionTable, build_transition_table
from wordchain.training import (
    build_model_cli, generate_cli, load_corpus_cli, resolve_seed_context
)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(train, "setup_logging", lambda level: None)


def test_resolve_seed_context_uses_last_words(cycle_table):
    assert resolve_seed_context(cycle_table, ["sat", "on"]) == ("on",)


def test_resolve_seed_context_defaults_to_most_common(cycle_table):
    assert resolve_seed_context(cycle_table) == ("the",)


def test_resolve_seed_context_errors(cycle_table):
    with pytest.raises(UnknownContextError):
        resolve_seed_context(cycle_table, ["dog"])


def test_load_and_build_with_year_window(speech_dir):
    config = ModelConfig(id_rule='year', min_year=1950, lowercase=True)
    corpus = load_corpus_cli(config, corpus_dir=str(speech_dir))
    assert corpus.document_ids == [1962, 2001]

    table = build_model_cli(corpus, config)
    assert ("union",) in table
    assert ("Union",) not in table


def test_load_corpus_cli_needs_a_source():
    with pytest.raises(ValueError):
        load_corpus_cli(ModelConfig())


def test_generate_cli_reports_unknown_context(cycle_table):
    assert generate_cli(cycle_table, ModelConfig(length=5), start=["dog"]) is None
    text = generate_cli(cycle_table, ModelConfig(length=5, seed=1), start=["the"])
    assert len(text.split()) == 5


def test_main_builds_saves_and_reloads(speech_dir, tmp_path):
    path = tmp_path / "table.json"
    assert train.main([
        '--corpus-dir', str(speech_dir), '--by-year', '--n', '2',
        '--save', str(path)
    ]) == 0

    table = TransitionTable.load(path)
    assert table.order == 2
    assert ("The",) in table

    assert train.main(['--load', str(path), '--generate', '3', '--start', 'The']) == 0


def test_main_reports_unreadable_corpus(tmp_path):
    assert train.main(['--corpus-dir', str(tmp_path / "missing")]) == 1


def test_main_requires_a_source():
    with pytest.raises(SystemExit):
        train.main([])


def test_main_reports_missing_table(tmp_path):
    assert train.main(['--load', str(tmp_path / "missing.json")]) == 1


def test_resolve_seed_context_folds_case():
    table = build_transition_table("the cat sat on the mat".split(), order=2, lowercase=True)
    assert resolve_seed_context(table, ["On", "The"]) == ("the",)


def test_main_start_words_follow_loaded_table(speech_dir, tmp_path, monkeypatch):
    path = tmp_path / "table.json"
    assert train.main([
        '--corpus-dir', str(speech_dir), '--lowercase', '--save', str(path)
    ]) == 0
    assert TransitionTable.load(path).lowercase

    outputs = []

    def record(table, config, start=None):
        outputs.append(generate_cli(table, config, start=start))

    monkeypatch.setattr(train, "generate_cli", record)
    assert train.main(['--load', str(path), '--generate', '4', '--seed', '1', '--start', 'The']) == 0
    assert len(outputs[0].split()) == 4
