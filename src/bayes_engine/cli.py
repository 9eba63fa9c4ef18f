"""Command-line interface for the Naive Bayes engine.

Provides ``evaluate``, ``classify`` and ``inspect`` commands with rich
terminal output using the ``click`` and ``rich`` libraries. The store
lives only for the duration of a command, so every command trains from
a dataset file first.

Usage::

    bayes-engine evaluate train.txt test.txt --stop-words stop.txt
    bayes-engine evaluate adult.data adult.test --format csv \\
        --schema "age:gaussian,workclass:category,..." --sigma-factor 0.05
    bayes-engine classify train.txt "cheap meds online"
    bayes-engine inspect adult.data --format csv --schema "..."
"""

from __future__ import annotations

import functools
import json
import sys
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import GaussianScheme, ModelConfig
from .datasets import load_delimited, load_labeled_text, parse_schema
from .errors import BayesEngineError
from .evaluation import best_label, compute_metrics
from .log_setup import setup_logging
from .model import Model, ModelSummary, Prediction
from .models import Feature, LabeledExample
from .preprocessing import load_stop_words

console = Console()


def _dataset_options(func: Callable) -> Callable:
    """Options describing how dataset files are laid out."""
    options = [
        click.option("--format", "fmt", type=click.Choice(["text", "csv"]), default="text",
                     help="Dataset layout: '<label> <text>' lines or delimited rows."),
        click.option("--schema", default=None,
                     help="Column schema for csv, e.g. 'age:gaussian,job:category'."),
        click.option("--label-column", type=int, default=-1, show_default=True,
                     help="Index of the label column for csv."),
        click.option("--delimiter", default=",", show_default=True,
                     help="Field separator for csv."),
        click.option("--feature-name", default="text", show_default=True,
                     help="Feature name used for text datasets."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _model_options(func: Callable) -> Callable:
    """Options overriding the model configuration (env defaults apply)."""
    options = [
        click.option("--pseudo-count", type=float, default=None, help="Smoothing constant."),
        click.option("--prior-factor", type=float, default=None, help="Weight of the prior."),
        click.option("--sigma-factor", type=float, default=None,
                     help="Range fraction used as sigma by the shared-sigma scheme."),
        click.option("--default-m2", type=float, default=None,
                     help="Initial m2 of new Welford accumulators."),
        click.option("--gaussian-scheme", type=click.Choice([s.value for s in GaussianScheme]),
                     default=None, help="Variance scheme for Gaussian features."),
        click.option("--soft", is_flag=True,
                     help="Use the heavy-tailed Gaussian approximation."),
        click.option("--stop-words", type=click.Path(exists=True, path_type=Path), default=None,
                     help="File of stop words dropped from text features."),
        click.option("--workers", type=int, default=None, help="Batch prediction threads."),
        click.option("--verbose", "-v", is_flag=True, help="Enable debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _handle_errors(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BayesEngineError as e:
            console.print(f"[bold red]Error:[/] {escape(str(e))}")
            sys.exit(1)
    return wrapper


@click.group()
@click.version_option(package_name="bayes-engine")
def main() -> None:
    """Incremental Naive Bayes over text, category and Gaussian features.

    Train a model from a labeled dataset, then evaluate it, classify an
    example, or inspect the accumulated statistics.
    """
    pass


@main.command()
@click.argument("train_file", type=click.Path(exists=True, path_type=Path))
@click.argument("test_file", type=click.Path(exists=True, path_type=Path))
@_dataset_options
@_model_options
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_handle_errors
def evaluate(train_file: Path, test_file: Path, output: str, **options) -> None:
    """Train on TRAIN_FILE and report accuracy on TEST_FILE.

    Example: bayes-engine evaluate train.txt test.txt
    """
    model, name = _train(train_file, options)
    test_data = _load(test_file, options)

    with console.status("[bold blue]Predicting...", spinner="dots"):
        distributions = model.predict_batch(name, [features for _, features in test_data])

    y_true = [label for label, _ in test_data]
    y_pred = [best_label(d) for d in distributions]
    metrics = compute_metrics(y_true, y_pred)

    if output == "json":
        click.echo(json.dumps(metrics.to_dict(), indent=2))
        return

    console.print(Panel(
        f"[bold]{train_file.name}[/] → [bold]{test_file.name}[/]\n"
        f"Test size: {len(test_data)} | "
        f"Accuracy: [bold green]{metrics.accuracy:.2%}[/] | "
        f"Macro F1: {metrics.macro_f1:.4f} | "
        f"Weighted F1: {metrics.weighted_f1:.4f}",
        title="Evaluation",
        border_style="blue",
    ))

    table = Table(title="Per-class metrics", show_lines=False)
    table.add_column("Class", style="cyan")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("F1", justify="right")
    table.add_column("Support", justify="right")
    for cls in sorted(metrics.per_class):
        m = metrics.per_class[cls]
        table.add_row(
            cls,
            f"{m['precision']:.4f}",
            f"{m['recall']:.4f}",
            f"{m['f1']:.4f}",
            str(metrics.support.get(cls, 0)),
        )
    console.print(table)


@main.command()
@click.argument("train_file", type=click.Path(exists=True, path_type=Path))
@click.argument("values", nargs=-1, required=True)
@_dataset_options
@_model_options
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_handle_errors
def classify(train_file: Path, values: tuple[str, ...], output: str, **options) -> None:
    """Train on TRAIN_FILE and classify one example given by VALUES.

    For text datasets VALUES are joined into one text. For csv datasets
    give one value per schema column, in order (use '?' for missing).

    Example: bayes-engine classify spam.txt "win a free prize now"
    """
    features = _example_features(values, options)
    model, name = _train(train_file, options)
    prediction = model.classify(name, features)

    if output == "json":
        click.echo(json.dumps(prediction.to_dict(), indent=2))
    else:
        _render_prediction(prediction)


@main.command()
@click.argument("train_file", type=click.Path(exists=True, path_type=Path))
@_dataset_options
@_model_options
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_handle_errors
def inspect(train_file: Path, output: str, **options) -> None:
    """Train on TRAIN_FILE and show the accumulated statistics.

    Example: bayes-engine inspect train.txt
    """
    model, name = _train(train_file, options)
    summary = model.summary(name)

    if output == "json":
        click.echo(json.dumps({
            "model": summary.to_dict(),
            "config": model.config.to_dict(),
        }, indent=2))
    else:
        _render_summary(summary)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _build_model(options: dict) -> Model:
    setup_logging(options.get("verbose", False))

    overrides = {
        "pseudo_count": options.get("pseudo_count"),
        "prior_factor": options.get("prior_factor"),
        "default_gaussian_sigma_factor": options.get("sigma_factor"),
        "default_gaussian_m2": options.get("default_m2"),
        "gaussian_scheme": options.get("gaussian_scheme"),
        "soft_gaussian": True if options.get("soft") else None,
        "max_workers": options.get("workers"),
    }
    if options.get("stop_words") is not None:
        overrides["stop_words"] = load_stop_words(options["stop_words"])

    config = ModelConfig.from_env()
    return Model(config=config).configure(
        **{k: v for k, v in overrides.items() if v is not None}
    )


def _load(path: Path, options: dict) -> list[LabeledExample]:
    if options["fmt"] == "csv":
        if not options.get("schema"):
            raise click.UsageError("--schema is required for csv datasets")
        return load_delimited(
            path,
            parse_schema(options["schema"]),
            label_column=options["label_column"],
            delimiter=options["delimiter"],
        )
    return load_labeled_text(path, feature_name=options["feature_name"])


def _train(path: Path, options: dict) -> tuple[Model, str]:
    model = _build_model(options)
    name = path.stem
    examples = _load(path, options)

    with console.status(f"[bold blue]Training on {len(examples)} examples...", spinner="dots"):
        report = model.train(name, examples)

    if report.skipped:
        console.print(f"[yellow]{report.skipped} malformed feature(s) skipped[/]")
    return model, name


def _example_features(values: tuple[str, ...], options: dict) -> list[Feature]:
    if options["fmt"] != "csv":
        return [Feature.text(options["feature_name"], " ".join(values))]

    if not options.get("schema"):
        raise click.UsageError("--schema is required for csv datasets")
    schema = parse_schema(options["schema"])
    if len(values) != len(schema):
        raise click.UsageError(f"Expected {len(schema)} values, got {len(values)}")
    return [
        Feature(kind, name, value)
        for (name, kind), value in zip(schema, values)
        if value != "?"
    ]


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_prediction(prediction: Prediction) -> None:
    if prediction.label is None:
        console.print("[yellow]Model has no classes; nothing to predict.[/]")
        return

    table = Table(title=f"Prediction: [bold]{prediction.label}[/]", show_lines=False)
    table.add_column("Class", style="cyan")
    table.add_column("Probability", justify="right")

    ranked = sorted(prediction.probabilities.items(), key=lambda x: x[1], reverse=True)
    for cls, probability in ranked[:20]:
        style = "bold green" if cls == prediction.label else ""
        table.add_row(cls, f"[{style}]{probability:.4f}[/]" if style else f"{probability:.4f}")

    if len(ranked) > 20:
        table.add_row("...", f"({len(ranked) - 20} more)")

    console.print(table)


def _render_summary(summary: ModelSummary) -> None:
    console.print(Panel(
        f"[bold]{summary.name}[/]\n"
        f"Classes: {len(summary.classes)} | "
        f"Feature instances: {summary.total_data_count:g}",
        title="Model Summary",
        border_style="blue",
    ))

    if summary.prior_counts:
        table = Table(title="Class priors")
        table.add_column("Class", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Share", justify="right")
        total: Optional[float] = summary.total_data_count or None
        for cls, count in sorted(summary.prior_counts.items(), key=lambda x: x[1], reverse=True):
            share = f"{count / total:.1%}" if total else "-"
            table.add_row(cls, f"{count:g}", share)
        console.print(table)

    if summary.vocabulary_sizes or summary.gaussian_features:
        table = Table(title="Features")
        table.add_column("Feature", style="cyan")
        table.add_column("Kind")
        table.add_column("Vocabulary", justify="right")
        for feature, size in summary.vocabulary_sizes.items():
            table.add_row(feature, "tokens", str(size))
        for feature in summary.gaussian_features:
            table.add_row(feature, "gaussian", "-")
        console.print(table)


if __name__ == "__main__":
    main()
