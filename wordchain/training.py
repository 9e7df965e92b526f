"""
Terminal UI for Building Tables and Generating Text

This module wraps corpus loading, table building and generation with
progress spinners, statistics panels and an interactive prompt using the
Rich library.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .config import ModelConfig
from .corpus import ID_RULES, Corpus, load_directory, load_state_union
from .errors import UnknownContextError
from .generator import generate_text
from .model import TransitionTable, build_transition_table


console = Console()


def setup_logging(level: int = logging.INFO) -> None:
    """Route log records through Rich on the shared console."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


def create_stats_table(stats: Dict) -> Table:
    """Create a Rich table displaying statistics."""
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="green")
    table.add_column("Value", style="yellow", justify="right")

    for key, value in stats.items():
        display_key = key.replace('_', ' ').title()

        if isinstance(value, bool):
            display_value = "yes" if value else "no"
        elif isinstance(value, float):
            display_value = f"{value:,.4f}"
        elif isinstance(value, int):
            display_value = f"{value:,}"
        else:
            display_value = str(value)

        table.add_row(display_key, display_value)

    return table


def create_frequency_table(corpus: Corpus, top_k: int = 10) -> Table:
    """Rank/frequency table; rank x count stays roughly flat under Zipf's law."""
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("Rank", justify="right")
    table.add_column("Word", style="green")
    table.add_column("Count", style="yellow", justify="right")
    table.add_column("Rank x Count", justify="right")

    for rank, word, count in corpus.rank_frequencies(top_k):
        table.add_row(str(rank), word, f"{count:,}", f"{rank * count:,}")

    return table


def resolve_seed_context(table: TransitionTable,
                         words: Optional[Sequence[str]] = None) -> Tuple[str, ...]:
    """
    Pick the n-1 seed words for a generation run.

    The last n-1 of the given words are used, folded to the case setting
    of the table; without words the most frequent context is used.

    Raises:
        ValueError: If fewer than n-1 words are given
        UnknownContextError: If the chosen context is not in the table
    """
    width = table.order - 1
    if not words:
        return table.most_common_context()
    if len(words) < width:
        raise ValueError(f"Need at least {width} start words, got {len(words)}")

    context = tuple(table.normalize(words[len(words) - width:]))
    table.distribution(context)
    return context


def load_corpus_cli(config: ModelConfig,
                    corpus_dir: Optional[str] = None,
                    state_union: bool = False,
                    skip_unreadable: bool = False,
                    workers: int = 1) -> Corpus:
    """
    Load a corpus with a spinner and apply the config's year window.

    Args:
        config: Model configuration
        corpus_dir: Directory of plain-text documents
        state_union: Load NLTK's State of the Union corpus instead
        skip_unreadable: Skip files that cannot be read
        workers: Number of threads used to read files

    Returns:
        The loaded (and possibly filtered) Corpus
    """
    if not corpus_dir and not state_union:
        raise ValueError("Either a corpus directory or the State of the Union corpus is required")

    with console.status("[cyan]Loading corpus..."):
        if state_union:
            corpus = load_state_union(lowercase=config.lowercase)
        else:
            corpus = load_directory(
                corpus_dir,
                pattern=config.pattern,
                id_rule=ID_RULES[config.id_rule],
                lowercase=config.lowercase,
                encoding=config.encoding,
                skip_unreadable=skip_unreadable,
                workers=workers
            )

    year_filter = config.year_filter()
    if year_filter is not None:
        corpus = corpus.select(year_filter)

    for path, error in corpus.failures:
        console.print(f"[red]✗[/red] Skipped {path}: {escape(error.reason or '')}")

    stats = corpus.stats
    console.print(f"[green]✓[/green] Loaded {stats['num_documents']:,} documents "
                  f"({stats['total_tokens']:,} tokens)")
    return corpus


def build_model_cli(corpus: Corpus, config: ModelConfig,
                    save_path: Optional[str] = None,
                    top_k: int = 10) -> TransitionTable:
    """
    Build a transition table with terminal output.

    Args:
        corpus: Loaded corpus
        config: Model configuration
        save_path: Path to save the table as JSON
        top_k: Number of frequent words to display

    Returns:
        The built TransitionTable
    """
    console.print()
    console.print(Panel.fit(
        "[bold blue]N-gram Transition Table[/bold blue]",
        border_style="blue"
    ))
    console.print()

    config_table = Table(box=box.SIMPLE, show_header=False)
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value", style="white")
    config_table.add_row("Model Order (n)", str(config.order))
    config_table.add_row("Lowercase", str(config.lowercase))
    config_table.add_row("Cross Documents", str(config.cross_documents))
    config_table.add_row("Years", f"{config.min_year or '-'} .. {config.max_year or '-'}")
    console.print(Panel(config_table, title="[bold]Configuration[/bold]", border_style="green"))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console
    ) as progress:
        task = progress.add_task("[cyan]Counting n-grams...", total=None)
        table = build_transition_table(
            corpus, order=config.order, cross_documents=config.cross_documents
        )
        progress.remove_task(task)

    console.print("[green]✓[/green] Build complete!")
    console.print()

    stats = dict(corpus.stats)
    stats.update(table.stats)
    console.print(Panel(
        create_stats_table(stats),
        title="[bold]Statistics[/bold]",
        border_style="yellow"
    ))
    console.print(Panel(
        create_frequency_table(corpus, top_k),
        title="[bold]Most Frequent Words[/bold]",
        border_style="magenta"
    ))

    if save_path:
        with console.status("[cyan]Saving table..."):
            table.save(save_path)
        console.print(f"[green]✓[/green] Table saved to: [bold]{save_path}[/bold]")

    return table


def generate_cli(table: TransitionTable, config: ModelConfig,
                 start: Optional[Sequence[str]] = None) -> Optional[str]:
    """Generate and print one run of ``config.length`` words."""
    try:
        context = resolve_seed_context(table, start)
        text = generate_text(table, context, length=config.length, seed=config.seed)
    except (ValueError, UnknownContextError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return None

    console.print(Panel(text, title="[bold]Generated[/bold]", border_style="green"))
    return text


def interactive_demo(table: TransitionTable, config: ModelConfig):
    """Run an interactive prediction and generation prompt."""
    console.print()
    console.print(Panel.fit(
        "[bold magenta]Interactive Demo[/bold magenta]\n"
        f"Enter at least {table.order - 1} words to see predictions.\n"
        "Type 'quit' to exit.",
        border_style="magenta"
    ))
    console.print()

    while True:
        try:
            user_input = console.input("[bold cyan]Enter context:[/bold cyan] ")
        except (KeyboardInterrupt, EOFError):
            break

        if user_input.lower() in ('quit', 'exit', 'q'):
            break

        words: List[str] = table.normalize(user_input.split())

        try:
            context = resolve_seed_context(table, words)
        except (ValueError, UnknownContextError) as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
            continue

        console.print()
        console.print(f"[yellow]Context:[/yellow] {' '.join(context)}")
        console.print("[yellow]Top predictions:[/yellow]")

        for i, (word, prob) in enumerate(table.most_likely(context, top_k=10), 1):
            bar_length = int(prob * 50)
            bar = "█" * bar_length + "░" * (50 - bar_length)
            console.print(f"  {i:2}. {word:15} {bar} {prob:.4f}")

        console.print()
        generate_cli(table, config, start=list(context))

    console.print("\n[yellow]Goodbye![/yellow]")


def load_model_cli(path: str) -> TransitionTable:
    """Load a saved table with a spinner."""
    with console.status(f"[cyan]Loading table from {path}..."):
        table = TransitionTable.load(Path(path))
    console.print(f"[green]✓[/green] Table loaded from: [bold]{path}[/bold]")
    return table
