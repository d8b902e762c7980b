"""
Evaluation Module

This module provides position evaluation functions for the engine.
The key design principle is that evaluators are SWAPPABLE - the search
algorithm should work with any evaluator that implements the base interface.

Key Components:
    - Evaluator (ABC): Abstract base class defining the evaluation interface
    - ClassicalEvaluator: Material + piece-square table evaluation

Data Flow:
    Board → evaluator.evaluate() → int
                                   Positive = Red advantage
                                   Negative = Black advantage
"""

from xiangqi_engine.evaluation.base import Evaluator, INFINITY, MATE_SCORE
from xiangqi_engine.evaluation.classical import ClassicalEvaluator

__all__ = ['Evaluator', 'ClassicalEvaluator', 'INFINITY', 'MATE_SCORE']
