import random
from itertools import islice

import pytest

from wordchain.errors import UnknownContextError
from wordchain.generator import TextGenerator, generate, generate_text
from wordchain.model import TransitionTable, build_transition_table


def test_same_seed_same_output(cycle_table):
    first = list(generate(cycle_table, ("the",), length=40, seed=1234))
    second = list(generate(cycle_table, ("the",), length=40, seed=1234))
    assert first == second


def test_explicit_rng_is_used(cycle_table):
    first = list(generate(cycle_table, ("the",), length=30, rng=random.Random(5)))
    second = list(generate(cycle_table, ("the",), length=30, rng=random.Random(5)))
    assert first == second


@pytest.mark.parametrize("length", [0, 1, 2, 25])
def test_finite_run_has_exact_length(cycle_table, length):
    words = list(generate(cycle_table, ("the",), length=length, seed=0))
    assert len(words) == length


def test_seed_words_are_counted_in_output(cycle_table):
    words = list(generate(cycle_table, ("on",), length=5, seed=3))
    assert words[0] == "on"
    assert words[1] == "the"


def test_seed_can_be_left_out(cycle_table):
    words = list(generate(cycle_table, ("on",), length=5, include_seed=False, seed=3))
    assert len(words) == 5
    assert words[0] == "the"


def test_trigram_window_slides():
    table = build_transition_table("a b c a b d a b c a b".split(), order=3)
    words = list(generate(table, ("a", "b"), length=12, seed=9))
    assert len(words) == 12
    for i in range(2, len(words)):
        assert words[i] in table[(words[i - 2], words[i - 1])]


def test_unbounded_run_can_stop_anywhere(cycle_table):
    sampler = TextGenerator(cycle_table, ("the",), seed=42)
    for steps, word in enumerate(sampler, start=1):
        assert sampler.state == (word,)
        assert sampler.state in cycle_table
        if steps == 100:
            break

    assert len(sampler.state) == 1
    sampler.step()
    assert len(sampler.state) == 1


def test_unbounded_generate_is_lazy(cycle_table):
    words = generate(cycle_table, ("the",), seed=8)
    assert len(list(islice(words, 500))) == 500


def test_reset_replays_the_run(cycle_table):
    sampler = TextGenerator(cycle_table, ("the",), seed=11)
    first = sampler.take(20)
    sampler.reset()
    assert sampler.state == ("the",)
    assert sampler.take(20) == first


def test_unknown_seed_context_raises(cycle_table):
    with pytest.raises(UnknownContextError):
        TextGenerator(cycle_table, ("dog",))
    with pytest.raises(UnknownContextError):
        generate(cycle_table, ("dog",), length=5)


def test_dead_end_during_run_raises():
    table = build_transition_table("a b c".split(), order=2)
    with pytest.raises(UnknownContextError) as excinfo:
        list(generate(table, ("b",), length=5, include_seed=False, seed=0))
    assert excinfo.value.context == ("c",)


def test_seed_must_have_n_minus_one_words(cycle_table):
    with pytest.raises(ValueError):
        TextGenerator(cycle_table, ("the", "cat"))
    with pytest.raises(ValueError):
        TextGenerator(cycle_table, ())


def test_negative_length_rejected(cycle_table):
    with pytest.raises(ValueError):
        generate(cycle_table, ("the",), length=-1)


def test_degenerate_distribution_always_resamples_same_word():
    table = build_transition_table("x y x y".split(), order=2)
    words = list(generate(table, ("x",), length=9, seed=123))
    assert words == ["x", "y"] * 4 + ["x"]


def test_sampling_follows_probabilities():
    table = TransitionTable(2, {("must",): {"pass": 3, "fail": 1}})
    sampler = TextGenerator(table, ("must",), rng=random.Random(0))

    passes = 0
    for _ in range(4000):
        passes += sampler.step() == "pass"
        sampler.reset()

    assert 0.7 < passes / 4000 < 0.8


def test_unigram_generation_needs_no_seed():
    table = build_transition_table("a a a b".split(), order=1)
    words = list(generate(table, length=10, seed=2))
    assert len(words) == 10
    assert set(words) <= {"a", "b"}


def test_generate_text_joins_with_spaces(cycle_table):
    text = generate_text(cycle_table, ("the",), length=6, seed=4)
    assert text == " ".join(generate(cycle_table, ("the",), length=6, seed=4))
    assert len(text.split()) == 6
