"""
Kalida - Five-in-a-row Engine

A deterministic engine for the Kalida board-game family with AI opponents.
The engine works on plain grid snapshots and provides:
- Board state and move application
- Line-variant win detection (bounce, missing-teeth, wrap)
- Path-variant edge-to-edge win detection
- Threat heuristics and minimax search
- Difficulty-tagged bot policies
"""

__version__ = "0.1.0"
