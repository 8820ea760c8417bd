"""
Settings that depend on the environment the application runs in.

Rule constants (board size, fifty-move limit, ...) live next to the rules that use them.
"""

import os

DATABASE_URL = os.environ.get("CHESS_DATABASE_URL", "sqlite:///chess.db")
DATABASE_ECHO = os.environ.get("CHESS_DATABASE_ECHO", "false").lower() in {
    "1",
    "true",
    "yes",
}
