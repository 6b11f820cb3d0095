"""
RepoChat

Chat assistant that answers questions about a set of codebases, keeping each
project's local checkout in sync with a GitHub repository.
"""

__version__ = "1.0.0"
