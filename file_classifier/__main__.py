"""Main entry point for the File Classifier.

This allows the package to be run as:
    python -m file_classifier
"""

from .cli.main import cli

if __name__ == "__main__":
    cli()
