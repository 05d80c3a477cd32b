"""
Latin Drop
==========

A casual Latin-square puzzle: a solved N x N grid is partially emptied and the
player fills the blanks by dragging gravity-affected tokens from a pool into
the grid slots.

This package contains the puzzle core:

- Seeded, reproducible level generation (solved grid + mask)
- The slot binding resolver (snap, evict, reject)
- Grid validation once every slot is filled
- A pymunk adapter for the token pool and the session flow around it

All tunable parameters are in game_config.yaml.
"""

__version__ = "0.1.0"
