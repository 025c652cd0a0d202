"""Test helper modules for the gitpromote test suite.

- git_helpers: real git repositories (bare remotes, seed clones, commits)
- io_utils: project configuration writers
"""
