"""
Text Generation

Word-by-word sampling from a TransitionTable. Each step draws the next
word in proportion to its probability after the current window of n-1
words, then slides the window forward by one.
"""

import random
from itertools import chain, islice
from typing import Iterator, List, Optional, Sequence, Tuple

from .model import TransitionTable


class TextGenerator:
    """
    Unbounded, restartable sampler over a transition table.

    Iterating a TextGenerator never stops on its own; the caller ends a run
    by breaking out of the loop (or with ``itertools.islice``). The window
    always holds exactly n-1 words, including between steps.

    Attributes:
        table: The transition table sampled from
        seed_context: The n-1 words generation starts from
    """

    def __init__(self, table: TransitionTable, seed_context: Sequence[str] = (),
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            table: Trained transition table
            seed_context: Exactly n-1 starting words
            rng: Random source with a ``choices`` method; takes precedence
                over ``seed``
            seed: Seed for a private ``random.Random``

        Raises:
            ValueError: If seed_context does not hold n-1 words
            UnknownContextError: If seed_context was never observed
        """
        seed_context = tuple(seed_context)
        if len(seed_context) != table.order - 1:
            raise ValueError(
                f"A {table.order}-gram model needs {table.order - 1} seed words, "
                f"got {len(seed_context)}"
            )
        # Fail before the first step on an unseen seed
        table.distribution(seed_context)

        self.table = table
        self.seed_context = seed_context
        self._seed = seed
        self._rng = rng if rng is not None else random.Random(seed)
        self._owns_rng = rng is None
        self._state: Tuple[str, ...] = seed_context

    @property
    def state(self) -> Tuple[str, ...]:
        """The current window of n-1 words."""
        return self._state

    def reset(self) -> None:
        """Restore the seed window (and reseed a private random source)."""
        self._state = self.seed_context
        if self._owns_rng:
            self._rng.seed(self._seed)

    def step(self) -> str:
        """
        Sample one word and advance the window.

        Raises:
            UnknownContextError: If the window has no recorded continuation
        """
        dist = self.table.distribution(self._state)
        words = list(dist)
        weights = [dist[w] for w in words]
        word = self._rng.choices(words, weights=weights, k=1)[0]

        if self._state:
            self._state = self._state[1:] + (word,)
        return word

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        return self.step()

    def take(self, count: int) -> List[str]:
        """Sample the next ``count`` words."""
        if count < 0:
            raise ValueError("count must not be negative")
        return [self.step() for _ in range(count)]


def generate(table: TransitionTable, seed_context: Sequence[str] = (),
             length: Optional[int] = None,
             include_seed: bool = True,
             rng: Optional[random.Random] = None,
             seed: Optional[int] = None) -> Iterator[str]:
    """
    Lazily generate words from a transition table.

    Args:
        table: Trained transition table
        seed_context: Exactly n-1 starting words
        length: Total number of words to yield; None for an unbounded run
        include_seed: Whether the seed words are yielded (and counted
            towards length) before the sampled words
        rng: Random source with a ``choices`` method
        seed: Seed for a private ``random.Random``

    Returns:
        Iterator over the generated words

    Raises:
        ValueError: If length is negative or the seed has the wrong size
        UnknownContextError: If the seed or a later window is unseen
    """
    if length is not None and length < 0:
        raise ValueError("length must not be negative")

    sampler = TextGenerator(table, seed_context, rng=rng, seed=seed)
    words = chain(sampler.seed_context, sampler) if include_seed else sampler

    if length is None:
        return words
    return islice(words, length)


def generate_text(table: TransitionTable, seed_context: Sequence[str] = (),
                  length: int = 50, **kwargs) -> str:
    """Generate a finite run and join the words with spaces."""
    if length is None:
        raise ValueError("generate_text needs a finite length")
    return ' '.join(generate(table, seed_context, length=length, **kwargs))
