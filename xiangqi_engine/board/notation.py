"""
Chinese File Notation

Renders a move the way game records write it: <piece><file><action><target>.

    - Red counts files from its right to left with Chinese numerals (一..九);
      Black counts from its right too, which is the board's left, with
      Arabic digits (1..9)
    - Action: 進 (forward), 退 (backward), 平 (sideways)
    - Target: destination file for sideways and diagonal moves,
      number of steps for straight forward/backward moves

Examples:
    炮二平五   Red cannon on file 2 shifts to file 5
    馬2進3     Black knight on file 2 advances to file 3

When two or more pieces of the same kind and side share a file the file
digit is replaced by a 前/中/後 (front/middle/rear) prefix.
"""

from typing import Optional, Tuple

from xiangqi_engine.board.moves import Move
from xiangqi_engine.board.pieces import BOARD_HEIGHT, Position, Side
from xiangqi_engine.board.representation import Board

CHINESE_NUMBERS = "一二三四五六七八九"


def column_notation(x: int, side: Side) -> str:
    if side is Side.RED:
        return CHINESE_NUMBERS[8 - x]
    return str(x + 1)


def _count_notation(steps: int, side: Side) -> str:
    if side is Side.RED:
        return CHINESE_NUMBERS[steps - 1]
    return str(steps)


def _action_and_target(move: Move, side: Side) -> Tuple[str, str]:
    dx = move.to_pos.x - move.from_pos.x
    dy = move.to_pos.y - move.from_pos.y

    if dy == 0:
        return "平", column_notation(move.to_pos.x, side)

    forward = dy > 0 if side is Side.RED else dy < 0
    action = "進" if forward else "退"

    if dx == 0:
        return action, _count_notation(abs(dy), side)
    # Diagonal movers (knight, bishop, advisor) name the destination file
    return action, column_notation(move.to_pos.x, side)


def to_chinese(board: Board, move: Move) -> Optional[str]:
    """
    Render a move in Chinese file notation.

    Args:
        board: Position before the move
        move: Move to render

    Returns:
        Notation string, or None if the origin square is empty
    """
    piece = board.get(move.from_pos)
    if piece is None:
        return None

    action, target = _action_and_target(move, piece.side)
    return (
        f"{piece.display_char()}{column_notation(move.from_pos.x, piece.side)}"
        f"{action}{target}"
    )


def to_chinese_with_disambiguation(board: Board, move: Move) -> Optional[str]:
    """Like to_chinese(), using 前/中/後 when same-kind pieces share a file."""
    piece = board.get(move.from_pos)
    if piece is None:
        return None

    same_file = [
        Position(move.from_pos.x, y)
        for y in range(BOARD_HEIGHT)
        if board.get(Position(move.from_pos.x, y)) == piece
    ]
    if len(same_file) <= 1:
        return to_chinese(board, move)

    # Order from rearmost to foremost from the mover's point of view
    same_file.sort(key=lambda p: p.y, reverse=piece.side is Side.BLACK)
    index = same_file.index(move.from_pos)
    if index == 0:
        prefix = "後"
    elif index == len(same_file) - 1:
        prefix = "前"
    else:
        prefix = "中"

    action, target = _action_and_target(move, piece.side)
    return f"{prefix}{piece.display_char()}{action}{target}"
