"""
Main entry point for running the engine over UCCI.

Usage:
    python -m xiangqi_engine.ucci
"""

from xiangqi_engine.ucci.interface import main

if __name__ == "__main__":
    main()
