"""Counter Gateway — HTTP API proxying an on-chain Solana counter program.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
