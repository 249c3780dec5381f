"""
Entry point for running the Brand Visibility Engine as a module.

Enables execution via:
    python -m brand_visibility [command] [options]

This is equivalent to running the installed CLI:
    brand-visibility [command] [options]

Examples:
    python -m brand_visibility --help
    python -m brand_visibility analyze -c examples/engine.config.yaml \\
        -r examples/sample_answer.txt -p "best help desk software"
    python -m brand_visibility validate --config examples/engine.config.yaml
    python -m brand_visibility eval
"""

from brand_visibility.cli import app

if __name__ == "__main__":
    app()
