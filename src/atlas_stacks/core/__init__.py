# src/atlas_stacks/core/__init__.py
"""
Core do Atlas Stacks.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada (VCS substituível por um fake)
    - livre de estado global: diagnóstico flui por um `OperationContext`
      passado explicitamente

Componentes principais:
    - config  → arquivos de configuração por diretório
    - expr    → avaliação de expressões
    - stack   → stacks, globals e `watch`
    - run     → run env
    - changes → detector de mudanças
    - vcs     → git

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo erro é tipado e propagado
    - Nenhuma função do core escreve em stdout/stderr
"""
