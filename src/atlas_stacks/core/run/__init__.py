"""Ambiente de execução dos stacks (`config.run.env`)."""

from .env import EnvVars, load_env

__all__ = ["EnvVars", "load_env"]
