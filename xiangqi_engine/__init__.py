"""
Xiangqi Engine

A Chinese chess engine with classical evaluation and alpha-beta search,
usable as a library or as a UCCI engine behind a Xiangqi GUI.

## Architecture

The engine is organized into several key modules:

1. **board**: Board model and rules
   - Positions, pieces, board state and counters
   - Legal move generation, check and flying-general detection
   - FEN parsing, ICCS and Chinese move notation

2. **evaluation**: Position evaluation functions
   - Abstract Evaluator interface (swappable design)
   - ClassicalEvaluator: material plus piece-square tables

3. **search**: Search algorithms
   - Iterative-deepening negamax with alpha-beta pruning
   - Capture-only quiescence search
   - Transposition table with Zobrist hashing
   - Difficulty presets

4. **ucci**: Universal Chinese Chess Interface protocol
   - UCCI command handling
   - Search on a worker thread

5. **utils**: Testing and benchmarking utilities
   - Tactical test positions
   - Perft move-generator check

## Quick Start

### As a Python Library

```python
from xiangqi_engine.board import BoardState
from xiangqi_engine.search import Difficulty, SearchEngine

engine = SearchEngine.from_difficulty(Difficulty.MEDIUM)
move = engine.search(BoardState.initial())
print(f"Best move: {move.to_iccs()} (score: {engine.last_result.score})")
```

### As a UCCI Engine

```bash
python -m xiangqi_engine.ucci
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from xiangqi_engine.evaluation import ClassicalEvaluator, Evaluator
from xiangqi_engine.search import Difficulty, SearchConfig, SearchEngine, find_best_move

__all__ = [
    'Evaluator',
    'ClassicalEvaluator',
    'Difficulty',
    'SearchConfig',
    'SearchEngine',
    'find_best_move',
]
