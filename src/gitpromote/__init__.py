"""
gitpromote - automated git branch promotion

Clones a remote repository, merges a source branch into a target branch
with a recorded merge commit, and pushes the result back upstream.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
