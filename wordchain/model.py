"""
N-gram Transition Tables

This module contains the TransitionTable class, an immutable mapping from
contexts of n-1 words to the probability of each word observed after them,
and the builder that counts n-grams in a corpus.
"""

import json
import logging
from collections import Counter
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .corpus import Corpus, Document, Token
from .errors import EmptyInputError, UnknownContextError


logger = logging.getLogger(__name__)

Context = Tuple[str, ...]
Distribution = Mapping  # read-only word -> probability view

# Context words never contain spaces, so a space is a safe key separator
CONTEXT_SEPARATOR = ' '


def _as_words(tokens: Iterable) -> List[str]:
    return [t.text if isinstance(t, Token) else t for t in tokens]


def _as_streams(source, cross_documents: bool) -> List[List[str]]:
    """Normalize the builder input to a list of word sequences."""
    if isinstance(source, Corpus):
        streams = source.sequences()
    else:
        source = list(source)
        if source and all(isinstance(t, (str, Token)) for t in source):
            streams = [_as_words(source)]
        else:
            streams = [
                seq.words if isinstance(seq, Document) else _as_words(seq)
                for seq in source
            ]

    if cross_documents:
        return [[w for stream in streams for w in stream]]
    return streams


def count_ngrams(streams: Iterable[Sequence[str]], order: int) -> Dict[Context, Counter]:
    """
    Count next-word occurrences for every context.

    Args:
        streams: Word sequences counted independently of each other
        order: The n in n-gram

    Returns:
        Mapping of context -> Counter of next words, in first-seen order
    """
    if order < 1:
        raise ValueError("order must be at least 1")

    width = order - 1
    counts: Dict[Context, Counter] = {}

    for stream in streams:
        for i in range(width, len(stream)):
            context = tuple(stream[i - width:i])
            counts.setdefault(context, Counter())[stream[i]] += 1

    return counts


class TransitionTable(Mapping):
    """
    Immutable next-word probabilities conditioned on the previous n-1 words.

    Probabilities are maximum likelihood estimates with no smoothing:
    P(word | context) = count(context, word) / count(context). Contexts
    never seen in training are absent and looking them up raises
    UnknownContextError.

    Attributes:
        order: The n of the model (1 for unigram, 2 for bigram, ...)
        cross_documents: Whether contexts were allowed to span documents
        lowercase: Whether the words were case-folded before counting
    """

    def __init__(self, order: int, counts: Dict[Context, Dict[str, int]],
                 cross_documents: bool = True, lowercase: bool = False):
        if order < 1:
            raise ValueError("order must be at least 1")

        self.order = order
        self.cross_documents = cross_documents
        self.lowercase = lowercase

        frozen_counts = {}
        probabilities = {}
        context_counts = {}

        for context, followers in counts.items():
            context = tuple(context)
            if len(context) != order - 1:
                raise ValueError(
                    f"Context {context!r} does not have {order - 1} words"
                )
            followers = {w: c for w, c in followers.items() if c > 0}
            if not followers:
                continue

            total = sum(followers.values())
            context_counts[context] = total
            frozen_counts[context] = MappingProxyType(dict(followers))
            probabilities[context] = MappingProxyType(
                {word: count / total for word, count in followers.items()}
            )

        self._counts = MappingProxyType(frozen_counts)
        self._context_counts = MappingProxyType(context_counts)
        self._probabilities = MappingProxyType(probabilities)

    # Mapping protocol over contexts

    def __getitem__(self, context: Sequence[str]) -> Distribution:
        return self.distribution(context)

    def __iter__(self) -> Iterator[Context]:
        return iter(self._probabilities)

    def __len__(self) -> int:
        return len(self._probabilities)

    def __contains__(self, context) -> bool:
        try:
            return tuple(context) in self._probabilities
        except TypeError:
            return False

    def __eq__(self, other) -> bool:
        if not isinstance(other, TransitionTable):
            return NotImplemented
        return (self.order == other.order
                and self.cross_documents == other.cross_documents
                and self.lowercase == other.lowercase
                and self.counts() == other.counts())

    __hash__ = None

    def __repr__(self) -> str:
        return (f"TransitionTable(order={self.order}, contexts={len(self)}, "
                f"ngrams={self.num_ngrams})")

    # Lookups

    def normalize(self, words: Sequence[str]) -> List[str]:
        """Fold words to the case setting the table was built with."""
        if self.lowercase:
            return [w.lower() for w in words]
        return list(words)

    def distribution(self, context: Sequence[str]) -> Distribution:
        """
        Return the read-only next-word distribution for a context.

        Raises:
            UnknownContextError: If the context was never observed
        """
        context = tuple(context)
        try:
            return self._probabilities[context]
        except KeyError:
            raise UnknownContextError(context) from None

    def probability(self, context: Sequence[str], word: str) -> float:
        """P(word | context); 0.0 for a word never seen after a known context."""
        return self.distribution(context).get(word, 0.0)

    def count(self, context: Sequence[str], word: str) -> int:
        self.distribution(context)
        return self._counts[tuple(context)].get(word, 0)

    def context_count(self, context: Sequence[str]) -> int:
        """Number of times the context was followed by any word."""
        self.distribution(context)
        return self._context_counts[tuple(context)]

    def contexts(self) -> List[Context]:
        return list(self._probabilities)

    def counts(self) -> Dict[Context, Dict[str, int]]:
        """Return a mutable copy of the raw n-gram counts."""
        return {ctx: dict(followers) for ctx, followers in self._counts.items()}

    def most_likely(self, context: Sequence[str],
                    top_k: int = 10) -> List[Tuple[str, float]]:
        """
        Get the most probable next words for a context.

        Args:
            context: The context tuple
            top_k: Number of words to return

        Returns:
            List of (word, probability) tuples, sorted by probability
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        dist = self.distribution(context)
        ranked = sorted(dist.items(), key=lambda x: x[1], reverse=True)
        return ranked[:top_k]

    def most_common_context(self) -> Context:
        """The context observed most often (ties go to the first seen)."""
        if not self._context_counts:
            raise EmptyInputError("Transition table is empty")
        return max(self._context_counts, key=self._context_counts.get)

    def top_ngrams(self, top_k: int = 100) -> List[Tuple[Tuple[str, ...], int]]:
        """Get the most frequent n-grams."""
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        ngrams = Counter()
        for context, followers in self._counts.items():
            for word, count in followers.items():
                ngrams[context + (word,)] = count
        return ngrams.most_common(top_k)

    @property
    def num_ngrams(self) -> int:
        return sum(self._context_counts.values())

    @property
    def stats(self) -> Dict:
        vocab = set()
        for context, followers in self._counts.items():
            vocab.update(context)
            vocab.update(followers)
        return {
            'n': self.order,
            'cross_documents': self.cross_documents,
            'lowercase': self.lowercase,
            'vocab_size': len(vocab),
            'unique_contexts': len(self._counts),
            'unique_ngrams': sum(len(f) for f in self._counts.values()),
            'total_ngrams': self.num_ngrams
        }

    # Serialization

    def to_dict(self) -> Dict:
        """Convert to a JSON-compatible dict of counts keyed by joined context."""
        return {
            'order': self.order,
            'cross_documents': self.cross_documents,
            'lowercase': self.lowercase,
            'counts': {
                CONTEXT_SEPARATOR.join(ctx): dict(followers)
                for ctx, followers in self._counts.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'TransitionTable':
        order = int(data['order'])
        counts = {}
        for key, followers in data['counts'].items():
            context = tuple(key.split(CONTEXT_SEPARATOR)) if key else ()
            counts[context] = {w: int(c) for w, c in followers.items()}
        return cls(order, counts,
                   cross_documents=data.get('cross_documents', True),
                   lowercase=data.get('lowercase', False))

    def save(self, path: Union[str, Path]) -> None:
        """Save the table to a JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f)
        logger.info("Saved %d-gram table to %s", self.order, path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'TransitionTable':
        """Load a table from a JSON file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        table = cls.from_dict(data)
        logger.info("Loaded %r from %s", table, path)
        return table


def build_transition_table(source: Union[Corpus, Iterable], order: int = 2,
                           cross_documents: bool = True,
                           lowercase: Optional[bool] = None) -> TransitionTable:
    """
    Build a transition table from tokens.

    Args:
        source: A Corpus, a flat sequence of words or Tokens, or an
            iterable of such sequences (one per document)
        order: The n in n-gram; 1 gives unconditional word frequencies
        cross_documents: Treat all documents as one stream so contexts may
            span the boundary between two documents
        lowercase: Case setting of the words; a Corpus supplies its own and
            a conflicting value is rejected. Defaults to False otherwise

    Returns:
        The built TransitionTable

    Raises:
        ValueError: If order is less than 1 or lowercase contradicts the corpus
        EmptyInputError: If no n-gram could be extracted
    """
    if order < 1:
        raise ValueError("order must be at least 1")

    if isinstance(source, Corpus):
        if lowercase is not None and lowercase != source.lowercase:
            raise ValueError("lowercase does not match the corpus case setting")
        lowercase = source.lowercase

    streams = _as_streams(source, cross_documents)
    counts = count_ngrams(streams, order)

    if not counts:
        raise EmptyInputError(
            f"No {order}-grams found in {sum(len(s) for s in streams)} tokens"
        )

    table = TransitionTable(order, counts, cross_documents=cross_documents,
                            lowercase=bool(lowercase))
    logger.info("Built %d-gram table: %d contexts, %d n-grams",
                order, len(table), table.num_ngrams)
    return table
