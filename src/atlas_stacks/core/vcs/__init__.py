"""Colaborador VCS do Atlas Stacks (git)."""

from .git import VCS, Git

__all__ = ["Git", "VCS"]
