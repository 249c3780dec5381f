"""
CLI entrypoint for the Brand Visibility Engine.

Provides a dual-mode command-line interface with:
- Human-friendly output: Rich spinners, tables, colored text
- Agent-friendly output: Structured JSON for automation

Commands:
    analyze: Analyze one provider response against a brand catalog
    validate: Validate configuration and lint the brand catalog
    eval: Run evaluation suite to test detection and scoring accuracy

Exit codes:
    0: Success
    1: Configuration error (invalid YAML, missing API keys, bad fixtures)
    2: Input error (empty response or prompt)
    3: Evaluation failures (some test cases failed)

Examples:
    # Analyze a saved answer
    brand-visibility analyze --config engine.config.yaml \\
        --response answer.txt --prompt "best help desk software"

    # Agent-friendly JSON output (no spinners, no colors)
    brand-visibility analyze -c engine.config.yaml -r answer.txt -p "..." --format json

    # Lint the catalog before deploying it
    brand-visibility validate --config engine.config.yaml

Security:
    - API keys are loaded from environment variables only
    - Errors may contain file paths but never API keys
"""

from pathlib import Path

import typer
from rich.traceback import install as install_rich_traceback

from brand_visibility.completion.models import build_client_from_runtime
from brand_visibility.config.loader import load_config, resolve_assist_model
from brand_visibility.evals.runner import DEFAULT_FIXTURES_PATH, run_eval_suite
from brand_visibility.exceptions import ConfigurationError, InputError
from brand_visibility.extractor.gazetteer import build_gazetteer, find_near_duplicates
from brand_visibility.extractor.parser import analyze_response
from brand_visibility.utils.console import (
    error,
    info,
    output_mode,
    print_analysis_result,
    print_eval_table,
    print_lint_findings,
    spinner,
    success,
    warning,
)
from brand_visibility.utils.logging import setup_logging

# Install Rich tracebacks for better error messages
install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0  # Command completed
EXIT_CONFIG_ERROR = 1  # Config, API key or fixtures problem
EXIT_INPUT_ERROR = 2  # Empty response or prompt
EXIT_EVAL_FAILURE = 3  # At least one eval case failed

# Create Typer app
app = typer.Typer(
    name="brand-visibility",
    help="Extract brand and competitor mentions from AI answers and score visibility",
    add_completion=False,  # Skip shell completion for simplicity
)


def _fail(message: str, error_type: str, exit_code: int) -> None:
    """Report an error in the current output mode and exit."""
    error(message)

    if output_mode.is_agent():
        output_mode.add_json("error_type", error_type)
        output_mode.flush_json()

    raise typer.Exit(exit_code)


@app.command()
def analyze(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    response: Path = typer.Option(
        ...,
        "--response",
        "-r",
        help="Path to a text file holding the provider response",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    prompt: str = typer.Option(
        ...,
        "--prompt",
        "-p",
        help="Tracked search prompt that produced the response",
    ),
    strategy: str | None = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Override extraction strategy: 'deterministic' or 'assisted'",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Analyze one provider response for brand visibility.

    Detects org and competitor mentions, computes the org's position and
    the visibility score, and lists newly observed competitor names.

    Exit codes:
      0: Analysis completed
      1: Configuration error
      2: Empty response or prompt

    Examples:
      brand-visibility analyze -c engine.config.yaml -r answer.txt -p "best crm"

      # Force the assisted strategy (needs assist_model and its API key)
      brand-visibility analyze -c engine.config.yaml -r answer.txt -p "best crm" -s assisted
    """
    output_mode.format = format
    setup_logging(verbose=verbose, quiet_logs=output_mode.is_human())

    try:
        engine_config = load_config(config)
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}", "config_error", EXIT_CONFIG_ERROR)

    settings = engine_config.settings
    if strategy is not None:
        if strategy not in ("deterministic", "assisted"):
            _fail(
                f"Invalid strategy '{strategy}': must be 'deterministic' or 'assisted'",
                "config_error",
                EXIT_CONFIG_ERROR,
            )
        extraction = settings.extraction.model_copy(update={"strategy": strategy})
        settings = settings.model_copy(update={"extraction": extraction})

    client = None
    if settings.extraction.strategy == "assisted":
        try:
            runtime = resolve_assist_model(settings.extraction)
        except ConfigurationError as e:
            _fail(f"Configuration error: {e}", "config_error", EXIT_CONFIG_ERROR)
        client = build_client_from_runtime(runtime)

    response_text = response.read_text(encoding="utf-8")

    try:
        with spinner("Analyzing response..."):
            result = analyze_response(
                response_text=response_text,
                prompt_text=prompt,
                org_name=engine_config.org_name,
                brand_catalog=engine_config.brand_catalog,
                settings=settings,
                client=client,
            )
    except InputError as e:
        _fail(f"Input error: {e}", "input_error", EXIT_INPUT_ERROR)

    print_analysis_result(result.to_dict())

    if result.metadata.fallback_used:
        warning(f"Assisted extraction fell back to deterministic: {result.metadata.fallback_reason}")

    success(f"Analysis completed (score {result.score})")
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def validate(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """
    Validate configuration and lint the brand catalog.

    Checks:
    - YAML syntax is valid
    - All required fields are present and pass validation rules
    - The assist model API key is set when the assisted strategy is selected

    Catalog findings (advisory, do not fail validation):
    - collision: two entries share a normalized variant
    - near_duplicate: two names are probably the same entity

    Exit codes:
      0: Configuration is valid
      1: Configuration is invalid

    Examples:
      brand-visibility validate --config engine.config.yaml
      brand-visibility validate --config engine.config.yaml --format json
    """
    output_mode.format = format
    setup_logging(quiet_logs=True)

    try:
        with spinner("Validating configuration..."):
            engine_config = load_config(config)
            extraction = engine_config.settings.extraction
            if extraction.strategy == "assisted":
                resolve_assist_model(extraction)

            gazetteer = build_gazetteer(
                engine_config.brand_catalog,
                engine_config.org_name,
                engine_config.settings.classifier.resolved_known_competitors(),
            )
            near_duplicates = find_near_duplicates(engine_config.brand_catalog)
    except ConfigurationError as e:
        if output_mode.is_agent():
            output_mode.add_json("valid", False)
        _fail(f"Validation failed: {e}", "validation_error", EXIT_CONFIG_ERROR)

    findings = [
        {
            "kind": "collision",
            "first": collision.kept,
            "second": collision.dropped,
            "detail": f"shared variant '{collision.key}'",
        }
        for collision in gazetteer.collisions
    ]
    findings.extend(
        {
            "kind": "near_duplicate",
            "first": first,
            "second": second,
            "detail": f"similarity {similarity:.1f}",
        }
        for first, second, similarity in near_duplicates
    )

    success("Configuration is valid")
    info(f"Organization: {engine_config.org_name}")
    info(f"Catalog entries: {len(engine_config.brand_catalog)}")
    info(f"Extraction strategy: {engine_config.settings.extraction.strategy}")

    print_lint_findings(findings)
    if findings:
        warning(f"{len(findings)} catalog finding(s) to review")

    if output_mode.is_agent():
        output_mode.add_json("valid", True)
        output_mode.add_json("catalog_entries", len(engine_config.brand_catalog))
        output_mode.flush_json()

    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def eval(
    fixtures: Path = typer.Option(
        DEFAULT_FIXTURES_PATH,
        "--fixtures",
        "-f",
        help="Path to YAML file containing evaluation test cases",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    format: str = typer.Option(
        "text",
        "--format",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Run evaluation suite to test detection and scoring accuracy.

    Each case runs through the full analysis pipeline and is scored on
    competitor precision/recall/F1, org presence and the visibility score.
    Without --fixtures the bundled regression cases are used.

    Exit codes:
      0: All test cases passed
      1: Fixtures file error
      3: Any test case failed

    Examples:
      brand-visibility eval
      brand-visibility eval --fixtures my_cases.yaml --format json
    """
    output_mode.format = format
    setup_logging(verbose=verbose, quiet_logs=output_mode.is_human())

    info(f"Loading evaluation suite from: {fixtures}")

    try:
        with spinner("Running evaluation suite..."):
            eval_results = run_eval_suite(fixtures)
    except FileNotFoundError as e:
        _fail(f"Fixtures file not found: {e}", "file_not_found", EXIT_CONFIG_ERROR)
    except ValueError as e:
        _fail(f"Invalid fixtures format: {e}", "validation_error", EXIT_CONFIG_ERROR)

    total_cases = eval_results["total_test_cases"]
    passed_cases = eval_results["total_passed"]
    failed_cases = total_cases - passed_cases
    pass_rate = eval_results["summary"]["pass_rate"]

    print_eval_table([r.to_summary_dict() for r in eval_results["results"]])

    success(f"Evaluation completed: {passed_cases}/{total_cases} passed ({pass_rate:.1%})")

    if output_mode.is_agent():
        output_mode.add_json("summary", eval_results["summary"])

    if failed_cases > 0:
        warning(f"{failed_cases} test case(s) failed")
        output_mode.flush_json()
        raise typer.Exit(EXIT_EVAL_FAILURE)

    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    Brand Visibility Engine - score how visible your brand is in AI answers.

    Finds which known brands an AI-generated answer mentions, separates the
    organization's brand from competitors, and computes a bounded,
    explainable visibility score.

    Exit codes:
      0: Success
      1: Configuration error
      2: Input error
      3: Evaluation failures

    Use 'brand-visibility COMMAND --help' for detailed command documentation.
    """
    if version:
        from rich.console import Console

        console = Console()
        console.print(
            f"[bold cyan]brand-visibility[/bold cyan] version {_read_version()}"
        )
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        from rich.console import Console

        console = Console()
        console.print("[yellow]Use --help to see available commands[/yellow]")
        console.print()
        console.print("Commands:")
        console.print("  analyze   Analyze one provider response")
        console.print("  validate  Validate configuration and lint the catalog")
        console.print("  eval      Run evaluation suite")


def _read_version() -> str:
    """
    Read version from package metadata (pyproject.toml).

    Returns:
        Version string (e.g., "0.1.0")
    """
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("brand-visibility-engine")
    except PackageNotFoundError:
        return "0.1.0"


if __name__ == "__main__":
    app()
