"""
Corpus Loading and Tokenization

This module turns raw documents into ordered sequences of word tokens
tagged with the id (usually the year) of the document they came from.
"""

import logging
import re
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional,
    Sequence, Tuple, Union
)

import nltk
from nltk.corpus import state_union

from .errors import CorpusReadError


logger = logging.getLogger(__name__)

# Anything that is not an ASCII letter separates tokens
TOKEN_DELIMITER = re.compile(r'[^A-Za-z]+')
YEAR_PATTERN = re.compile(r'\d{4}')

PathLike = Union[str, Path]
IdRule = Callable[[Path], Hashable]


@dataclass(frozen=True)
class Token:
    """A single normalized word and the document it was read from."""
    text: str
    document_id: Hashable = None

    def __str__(self) -> str:
        return self.text


@dataclass
class Document:
    """The ordered tokens of one source document."""
    document_id: Hashable
    tokens: List[Token] = field(default_factory=list)
    source: Optional[Path] = None

    @property
    def words(self) -> List[str]:
        return [t.text for t in self.tokens]

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def ensure_nltk_data():
    """Download the State of the Union corpus if not present."""
    try:
        nltk.data.find('corpora/state_union')
    except LookupError:
        logger.info("Downloading State of the Union corpus...")
        nltk.download('state_union', quiet=True)


def iter_tokens(text: str, lowercase: bool = False) -> Iterator[str]:
    """
    Lazily split text into word tokens.

    Every run of characters outside A-Z/a-z is a delimiter, so
    contractions are split ("Don't" -> "Don", "t"). Empty strings
    produced by leading or trailing delimiters are dropped.
    """
    if lowercase:
        text = text.lower()
    for piece in TOKEN_DELIMITER.split(text):
        if piece:
            yield piece


def tokenize(text: str, lowercase: bool = False) -> List[str]:
    """
    Tokenize raw text into a list of words.

    Args:
        text: Raw input text
        lowercase: Whether to case-fold the tokens

    Returns:
        List of non-empty tokens in reading order
    """
    return list(iter_tokens(text, lowercase=lowercase))


def tokenize_document(text: str, document_id: Hashable = None,
                      lowercase: bool = False) -> List[Token]:
    """Tokenize text and tag every token with its document id."""
    return [Token(word, document_id) for word in iter_tokens(text, lowercase)]


def stem_from_filename(path: Path) -> str:
    """Use the file name without its extension as the document id."""
    return Path(path).stem


def year_from_filename(path: Path) -> int:
    """
    Parse the year out of a file name such as ``1945-Truman.txt``.

    Raises:
        ValueError: If the name contains no four-digit number
    """
    match = YEAR_PATTERN.search(Path(path).name)
    if match is None:
        raise ValueError(f"No year in file name: {Path(path).name}")
    return int(match.group())


ID_RULES: Dict[str, IdRule] = {
    'stem': stem_from_filename,
    'year': year_from_filename
}


def read_document(path: PathLike, id_rule: IdRule = stem_from_filename,
                  lowercase: bool = False,
                  encoding: str = 'utf-8') -> Document:
    """
    Read and tokenize a single document.

    Args:
        path: Path to a plain-text file
        id_rule: Callable mapping the path to a document id
        lowercase: Whether to case-fold the tokens
        encoding: Text encoding of the file

    Returns:
        The tokenized Document (possibly with no tokens)

    Raises:
        CorpusReadError: If the file is missing or unreadable
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusReadError(path, str(e)) from e

    document_id = id_rule(path)
    document = Document(
        document_id=document_id,
        tokens=tokenize_document(text, document_id, lowercase),
        source=path
    )
    if document.is_empty:
        logger.warning("Document %s produced no tokens", path)
    return document


class Corpus:
    """
    An ordered collection of documents tokenized with one case setting.

    Attributes:
        documents: Documents in load order
        lowercase: Whether every token was case-folded
        failures: (path, error) pairs for documents that could not be read
    """

    def __init__(self, documents: Optional[Iterable[Document]] = None,
                 lowercase: bool = False,
                 failures: Optional[List[Tuple[Path, CorpusReadError]]] = None):
        self.documents: List[Document] = list(documents or [])
        self.lowercase = lowercase
        self.failures: List[Tuple[Path, CorpusReadError]] = list(failures or [])

    @classmethod
    def from_texts(cls, texts: Union[Dict[Hashable, str], Iterable[Tuple[Hashable, str]]],
                   lowercase: bool = False) -> 'Corpus':
        """Build a corpus from (document_id, text) pairs already in memory."""
        items = texts.items() if isinstance(texts, dict) else texts
        documents = [
            Document(doc_id, tokenize_document(text, doc_id, lowercase))
            for doc_id, text in items
        ]
        return cls(documents, lowercase=lowercase)

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def __add__(self, other: 'Corpus') -> 'Corpus':
        if not isinstance(other, Corpus):
            return NotImplemented
        if other.lowercase != self.lowercase:
            raise ValueError("Cannot combine corpora with different case settings")
        return Corpus(self.documents + other.documents, lowercase=self.lowercase,
                      failures=self.failures + other.failures)

    @property
    def document_ids(self) -> List[Hashable]:
        return [d.document_id for d in self.documents]

    def select(self, predicate: Callable[[Hashable], bool]) -> 'Corpus':
        """Return a new corpus with the documents whose id satisfies predicate."""
        return Corpus(
            [d for d in self.documents if predicate(d.document_id)],
            lowercase=self.lowercase,
            failures=self.failures
        )

    def tokens(self) -> Iterator[Token]:
        """Iterate over every token of every document in order."""
        for document in self.documents:
            yield from document.tokens

    def sequences(self) -> List[List[str]]:
        """Return the token texts of each document as separate sequences."""
        return [document.words for document in self.documents]

    def word_frequencies(self) -> Counter:
        """Count how often each word occurs across the corpus."""
        return Counter(t.text for t in self.tokens())

    def rank_frequencies(self, top_k: Optional[int] = None) -> List[Tuple[int, str, int]]:
        """Return (rank, word, count) rows ordered by descending frequency."""
        ranked = self.word_frequencies().most_common(top_k)
        return [(rank, word, count) for rank, (word, count) in enumerate(ranked, start=1)]

    @property
    def stats(self) -> Dict[str, Any]:
        counts = self.word_frequencies()
        return {
            'num_documents': len(self.documents),
            'empty_documents': sum(1 for d in self.documents if d.is_empty),
            'failed_documents': len(self.failures),
            'total_tokens': sum(counts.values()),
            'vocab_size': len(counts),
            'lowercase': self.lowercase
        }


def load_corpus(paths: Iterable[PathLike],
                id_rule: IdRule = stem_from_filename,
                lowercase: bool = False,
                encoding: str = 'utf-8',
                skip_unreadable: bool = False,
                workers: int = 1) -> Corpus:
    """
    Load and tokenize several documents into one corpus.

    Args:
        paths: Files to read; the corpus keeps this order
        id_rule: Callable mapping each path to its document id
        lowercase: Whether to case-fold every token
        encoding: Text encoding of the files
        skip_unreadable: Record unreadable files in ``Corpus.failures``
            instead of raising
        workers: Number of threads used to read files

    Returns:
        The loaded Corpus

    Raises:
        CorpusReadError: If a file cannot be read and skip_unreadable is False
    """
    paths = [Path(p) for p in paths]

    def read(path: Path):
        try:
            return read_document(path, id_rule, lowercase, encoding)
        except CorpusReadError as e:
            if not skip_unreadable:
                raise
            logger.warning("Skipping unreadable document %s: %s", path, e.reason)
            return e

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(read, paths))
    else:
        results = [read(p) for p in paths]

    documents = [r for r in results if isinstance(r, Document)]
    failures = [(p, r) for p, r in zip(paths, results) if isinstance(r, CorpusReadError)]

    corpus = Corpus(documents, lowercase=lowercase, failures=failures)
    logger.info("Loaded %d documents (%d tokens)",
                len(corpus), corpus.stats['total_tokens'])
    return corpus


def load_directory(directory: PathLike, pattern: str = '*.txt',
                   **kwargs) -> Corpus:
    """
    Load every file in a directory matching a glob pattern.

    Files are read in sorted name order. Extra keyword arguments are
    passed to :func:`load_corpus`.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise CorpusReadError(directory, "not a directory")
    return load_corpus(sorted(directory.glob(pattern)), **kwargs)


def load_state_union(lowercase: bool = False,
                     fileids: Optional[Sequence[str]] = None) -> Corpus:
    """
    Load NLTK's State of the Union corpus with years as document ids.

    Args:
        lowercase: Whether to case-fold every token
        fileids: Optional subset of file ids (e.g. ``['1945-Truman.txt']``)

    Returns:
        Corpus of addresses in file id order
    """
    ensure_nltk_data()

    documents = []
    for fileid in fileids or state_union.fileids():
        year = year_from_filename(Path(fileid))
        documents.append(Document(
            document_id=year,
            tokens=tokenize_document(state_union.raw(fileid), year, lowercase),
            source=Path(fileid)
        ))

    corpus = Corpus(documents, lowercase=lowercase)
    logger.info("Loaded %d State of the Union addresses", len(corpus))
    return corpus
