"""
Threat Heuristics - Scores hypothetical moves by the threats they create.

Used in two places:
- Move selection: forcing moves, open fours, blocks of double threats
- Search: ordering root candidates and scoring leaves

All functions are stateless. Trial placements are undone before
returning, so boards come back unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.board import Board, Move, EMPTY
from ..engine_core.rules import (
    DIAGONALS,
    DIRECTIONS,
    LineRules,
    RuleConfig,
    has_missing_teeth,
    is_great_diagonal,
    is_on_major_axis,
    trace_bounce,
)


@dataclass(frozen=True)
class ThreatPriorities:
    """Priority scale for hypothetical moves. Higher = more urgent."""
    immediate_win: int = 100  # 4 in a row, one open end
    forced_win: int = 90  # Double-threat move
    critical_block_threshold: int = 95  # Opponent wins next move
    critical_threat_threshold: int = 85  # Interrupt own plan to block
    developing_threat: int = 85  # 3 in a row, one open end
    potential_threat: int = 50  # 2 in a row, two open ends
    early_threat: int = 30  # 2 in a row, one open end


@dataclass(frozen=True)
class PatternConfig:
    """Thresholds for pattern-based play."""
    min_bounce_pattern: int = 3
    min_bounce_priority: int = 80
    opening_book_moves: int = 3
    multiple_threat_count: int = 2


DEFAULT_PRIORITIES = ThreatPriorities()
DEFAULT_PATTERNS = PatternConfig()


# =============================================================================
# Line shapes
# =============================================================================

def _line_shape(
    board: Board, row: int, col: int, dr: int, dc: int, player: str
) -> tuple[int, int]:
    """
    Count consecutive cells through (row, col) and the open ends.

    Looks at most 4 steps each way. An empty cell is an open end and
    stops that side.
    """
    n = board.size
    cells = board.cells
    count = 1
    open_ends = 0
    for sign in (-1, 1):
        for i in range(1, 5):
            r, c = row + i * dr * sign, col + i * dc * sign
            if not (0 <= r < n and 0 <= c < n):
                break
            value = cells[r][c]
            if value == player:
                count += 1
            else:
                if value == EMPTY:
                    open_ends += 1
                break
    return count, open_ends


def _near_edge_sequence(
    board: Board, row: int, col: int, dr: int, dc: int, player: str, minimum: int
) -> bool:
    """A diagonal run close to an edge, where it could bounce."""
    n = board.size
    if not (row < 2 or row >= n - 2 or col < 2 or col >= n - 2):
        return False
    count = 1
    for sign in (-1, 1):
        for i in range(1, 4):
            r, c = row + i * dr * sign, col + i * dc * sign
            if board.get(r, c) != player:
                break
            count += 1
    return count >= minimum


def _shape_priority(count: int, open_ends: int, priorities: ThreatPriorities) -> int:
    if count >= 4 and open_ends >= 1:
        return priorities.immediate_win
    if count == 3 and open_ends >= 1:
        return priorities.developing_threat
    if count == 2 and open_ends == 2:
        return priorities.potential_threat
    if count == 2 and open_ends == 1:
        return priorities.early_threat
    return 0


# =============================================================================
# Scoring
# =============================================================================

def score_threat_potential(board: Board, row: int, col: int, player: str) -> int:
    """
    Diagonal threat bonus of a cell for `player`.

    For each diagonal, counts the player's cells and empty gaps within
    4 steps each way (an opposing cell stops that side).
    """
    n = board.size
    cells = board.cells
    bonus = 0

    for dr, dc in DIAGONALS:
        count = 0
        gaps = 0
        for sign in (-1, 1):
            for i in range(1, 5):
                r, c = row + i * dr * sign, col + i * dc * sign
                if not (0 <= r < n and 0 <= c < n):
                    continue
                value = cells[r][c]
                if value == player:
                    count += 1
                elif value == EMPTY:
                    gaps += 1
                else:
                    break

        if count >= 2:
            bonus += count * 5
            if gaps >= 2:
                bonus += 10

        on_main = (dr, dc) == (1, 1) and row == col
        on_anti = (dr, dc) == (1, -1) and row + col == n - 1
        if on_main or on_anti:
            bonus += 15

    return bonus


def count_threats(
    board: Board,
    row: int,
    col: int,
    player: str,
    config: RuleConfig | None = None,
    patterns: PatternConfig = DEFAULT_PATTERNS,
) -> int:
    """
    Count the winning-line threats a placement at (row, col) creates.

    A threat is four with an open end, or an open three. With bounce
    enabled, a diagonal run near an edge counts as well.
    """
    if not board.is_empty_at(row, col):
        return 0
    config = config or RuleConfig()

    threats = 0
    with board.trial(row, col, player):
        for dr, dc in DIRECTIONS:
            count, open_ends = _line_shape(board, row, col, dr, dc, player)
            if (count >= 4 and open_ends >= 1) or (count == 3 and open_ends == 2):
                threats += 1

        if config.bounce_enabled:
            for dr, dc in DIAGONALS:
                if _near_edge_sequence(
                    board, row, col, dr, dc, player, patterns.min_bounce_pattern
                ):
                    threats += 1
    return threats


def creates_open_four(board: Board, row: int, col: int, player: str) -> bool:
    """True if placing at (row, col) makes exactly four with both ends empty."""
    if not board.is_empty_at(row, col):
        return False

    n = board.size
    cells = board.cells
    with board.trial(row, col, player):
        for dr, dc in DIRECTIONS:
            start_r, start_c = row, col
            while board.get(start_r - dr, start_c - dc) == player:
                start_r, start_c = start_r - dr, start_c - dc
            end_r, end_c = row, col
            while board.get(end_r + dr, end_c + dc) == player:
                end_r, end_c = end_r + dr, end_c + dc

            length = max(abs(end_r - start_r), abs(end_c - start_c)) + 1
            if length != 4:
                continue
            before = (start_r - dr, start_c - dc)
            after = (end_r + dr, end_c + dc)
            if all(
                0 <= r < n and 0 <= c < n and cells[r][c] == EMPTY
                for r, c in (before, after)
            ):
                return True
    return False


def count_potential_wins(
    board: Board,
    row: int,
    col: int,
    player: str,
    config: RuleConfig | None = None,
    patterns: PatternConfig = DEFAULT_PATTERNS,
) -> int:
    """
    Count lines through (row, col) that could still become a win.

    A line qualifies with 3+ own cells, room for a full run, and no
    opposing cell within 4 steps. Gapped lines on a major axis are
    discarded when missing-teeth is enabled. Bounce traces of 3+ cells
    count when bounce is enabled.
    """
    if not board.is_empty_at(row, col):
        return 0
    config = config or RuleConfig()
    n = board.size
    cells = board.cells

    potential = 0
    with board.trial(row, col, player):
        for dr, dc in DIRECTIONS:
            run = [(row, col)]
            empty = 0
            blocked = False
            for sign in (-1, 1):
                for i in range(1, 5):
                    r, c = row + i * dr * sign, col + i * dc * sign
                    if not (0 <= r < n and 0 <= c < n):
                        break
                    value = cells[r][c]
                    if value == player:
                        run.append((r, c))
                    elif value == EMPTY:
                        empty += 1
                    else:
                        blocked = True
                        break

            if blocked or len(run) < 3 or len(run) + empty < config.win_length:
                continue
            if config.missing_teeth_enabled:
                run.sort()
                if (
                    is_on_major_axis(run, n)
                    and not is_great_diagonal(run, n)
                    and has_missing_teeth(run)
                ):
                    continue
            potential += 1

        if config.bounce_enabled:
            for dr, dc in DIAGONALS:
                trace = trace_bounce(
                    board, row, col, dr, dc, player, config.win_length - 1
                )
                if len(trace.path) >= patterns.min_bounce_pattern and trace.bounce_indices:
                    potential += 1

    return potential


def rate_move(
    board: Board,
    row: int,
    col: int,
    player: str,
    opponent: str,
    config: RuleConfig | None = None,
    priorities: ThreatPriorities = DEFAULT_PRIORITIES,
    patterns: PatternConfig = DEFAULT_PATTERNS,
) -> int:
    """
    Priority of playing (row, col) for `player`.

    Wins rank first, then blocks of an opponent win, double threats,
    and finally the best line shape the move creates.
    """
    if not board.is_empty_at(row, col):
        return 0
    config = config or RuleConfig()
    rules = LineRules(config)

    with board.trial(row, col, player):
        if rules.check_win(board, row, col).winner == player:
            return priorities.immediate_win
    with board.trial(row, col, opponent):
        if rules.check_win(board, row, col).winner == opponent:
            return priorities.critical_block_threshold
    if count_threats(board, row, col, player, config, patterns) >= patterns.multiple_threat_count:
        return priorities.forced_win

    best = 0
    with board.trial(row, col, player):
        for dr, dc in DIRECTIONS:
            count, open_ends = _line_shape(board, row, col, dr, dc, player)
            best = max(best, _shape_priority(count, open_ends, priorities))

        if config.bounce_enabled:
            for dr, dc in DIAGONALS:
                trace = trace_bounce(board, row, col, dr, dc, player, config.win_length)
                if len(trace.path) >= patterns.min_bounce_pattern and trace.bounce_indices:
                    best = max(best, patterns.min_bounce_priority)
    return best


# =============================================================================
# Move finders
# =============================================================================

def find_advanced_threat_move(
    board: Board,
    player: str,
    opponent: str,
    config: RuleConfig | None = None,
    patterns: PatternConfig = DEFAULT_PATTERNS,
) -> Move | None:
    """
    Find a forcing move.

    In order: a move giving `player` multiple threats, a move making an
    open four, a move denying `opponent` multiple threats.
    """
    config = config or RuleConfig()
    empty = board.empty_positions()

    for move in empty:
        if count_threats(board, move.row, move.col, player, config, patterns) >= patterns.multiple_threat_count:
            return move

    for move in empty:
        if creates_open_four(board, move.row, move.col, player):
            return move

    for move in empty:
        if count_threats(board, move.row, move.col, opponent, config, patterns) >= patterns.multiple_threat_count:
            return move

    return None


def find_diagonal_threat_move(board: Board, player: str, opponent: str) -> Move | None:
    """
    Find a cell that blocks an opponent's diagonal build-up.

    Great diagonals are checked first: two or more opposing cells on
    one means its first open cell is taken. Otherwise, the first open
    cell extending an opposing diagonal pair is returned.
    """
    n = board.size
    cells = board.cells

    for line in (
        [(i, i) for i in range(n)],
        [(i, n - 1 - i) for i in range(n)],
    ):
        held = sum(1 for r, c in line if cells[r][c] == opponent)
        open_cells = [Move(r, c) for r, c in line if cells[r][c] == EMPTY]
        if held >= 2 and open_cells:
            return open_cells[0]

    for move in board.occupied_positions(opponent):
        for forward, backward in (((-1, 1), (1, -1)), ((1, 1), (-1, -1))):
            count = 1
            open_cells: list[Move] = []
            for dr, dc in (forward, backward):
                for i in range(1, 5):
                    r, c = move.row + i * dr, move.col + i * dc
                    value = board.get(r, c)
                    if value == opponent:
                        count += 1
                        continue
                    if value == EMPTY:
                        open_cells.append(Move(r, c))
                    break
            if count >= 2 and open_cells:
                return open_cells[0]

    return None
