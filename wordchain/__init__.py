"""
Word-level N-gram Text Generation

Build Markov chain transition tables from plain-text corpora and sample
new text from them word by word.
"""

from .corpus import Corpus, Document, Token, load_corpus, load_directory, tokenize
from .errors import CorpusReadError, EmptyInputError, UnknownContextError
from .generator import TextGenerator, generate, generate_text
from .model import TransitionTable, build_transition_table

__version__ = "0.1.0"
__all__ = [
    "Corpus", "Document", "Token", "load_corpus", "load_directory", "tokenize",
    "CorpusReadError", "EmptyInputError", "UnknownContextError",
    "TextGenerator", "generate", "generate_text",
    "TransitionTable", "build_transition_table"
]
