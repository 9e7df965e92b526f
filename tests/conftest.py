import pytest

from wordchain.corpus import Corpus
from wordchain.model import build_transition_table


MUST_TEXT = "must pass must pass must fail must pass"

# Every word is followed by something somewhere, so bigram runs never dead-end
CYCLE_TEXT = "the cat sat on the mat the cat ran on the mat the"

SPEECHES = {
    "1946-Truman.txt": "The state of the Union is strong. The Union must endure.",
    "1962-Kennedy.txt": "We choose to go. We choose the Union!",
    "2001-Bush.txt": "The state of our Union is sound, and we must act.",
}


@pytest.fixture
def must_table():
    return build_transition_table(MUST_TEXT.split(), order=2)


@pytest.fixture
def cycle_table():
    return build_transition_table(CYCLE_TEXT.split(), order=2)


@pytest.fixture
def speech_dir(tmp_path):
    directory = tmp_path / "speeches"
    directory.mkdir()
    for name, text in SPEECHES.items():
        (directory / name).write_text(text, encoding="utf-8")
    return directory


@pytest.fixture
def two_doc_corpus():
    return Corpus.from_texts([("a", "alpha beta"), ("b", "gamma delta")])
