"""
UCCI Protocol Interface

This module implements the Universal Chinese Chess Interface (UCCI), the
text protocol Xiangqi GUIs use to talk to engines. It is a thin layer
over the search core: it parses commands, keeps the current position and
runs each search on a worker thread.

Protocol Flow:
    GUI → "ucci"
    Engine → "id name XiangqiEngine 0.1.0"
    Engine → "option ..."
    Engine → "ucciok"
    GUI → "isready"
    Engine → "readyok"
    GUI → "position startpos moves h2e2"
    GUI → "go depth 4"
    Engine → "info depth 1 score 40 nodes 812 time 35 pv h9g7"
    Engine → "bestmove h9g7"

Reference:
    UCCI Protocol: https://www.xqbase.com/protocol/cchess_ucci.htm
"""

from xiangqi_engine.ucci.interface import UCCIEngine

__all__ = ['UCCIEngine']
