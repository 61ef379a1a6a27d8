"""Command-line front end for the File Classifier."""
