"""
Kalida CLI - Command-line interface for the engine.

Usage:
    kalida move X..... .O.... ...... ...... ...... ......  --player X
    kalida status XXXXX. OOOO.. ...... ...... ...... ......
    kalida selfplay --x hard --o advanced --games 5 --seed 1
    kalida serve --port 8000

Boards are given row by row; "." is an empty cell.
"""

import argparse
import logging
import sys

from .engine_core.board import Board, EMPTY, PLAYER_O, PLAYER_X, PLAYERS
from .engine_core.rules import LineRules, RuleConfig


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Kalida - five-in-a-row engine",
        prog="kalida",
    )
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log engine decisions (-vv for search detail)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Move command
    move_parser = subparsers.add_parser("move", help="Suggest a move for a board")
    move_parser.add_argument("rows", nargs="+", help="Board rows, '.' for empty")
    move_parser.add_argument("--player", "-p", choices=PLAYERS, default=PLAYER_O)
    move_parser.add_argument("--difficulty", "-d", default="advanced")
    move_parser.add_argument("--seed", type=int, default=None)
    _add_rule_flags(move_parser)

    # Status command
    status_parser = subparsers.add_parser("status", help="Report the status of a board")
    status_parser.add_argument("rows", nargs="+", help="Board rows, '.' for empty")
    status_parser.add_argument("--path", action="store_true", help="Use the edge-to-edge variant")
    _add_rule_flags(status_parser)

    # Selfplay command
    selfplay_parser = subparsers.add_parser("selfplay", help="Let two difficulties play each other")
    selfplay_parser.add_argument("--x", dest="x_difficulty", default="medium")
    selfplay_parser.add_argument("--o", dest="o_difficulty", default="advanced")
    selfplay_parser.add_argument("--size", type=int, default=6)
    selfplay_parser.add_argument("--games", type=int, default=1)
    selfplay_parser.add_argument("--seed", type=int, default=None)
    _add_rule_flags(selfplay_parser)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "move":
        cmd_move(args)
    elif args.command == "status":
        cmd_status(args)
    elif args.command == "selfplay":
        cmd_selfplay(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _add_rule_flags(parser):
    parser.add_argument("--bounce", action="store_true", help="Enable the bounce rule")
    parser.add_argument("--missing-teeth", action="store_true", help="Enable the missing-teeth rule")
    parser.add_argument("--wrap", action="store_true", help="Enable the wrap rule")


def _rule_config(args) -> RuleConfig:
    return RuleConfig(
        bounce_enabled=args.bounce,
        missing_teeth_enabled=args.missing_teeth,
        wrap_enabled=args.wrap,
    )


def parse_rows(rows: list[str]) -> Board:
    """
    Build a board from text rows.

    Raises:
        ValueError: If the rows do not form a square board of ".", "X", "O"
    """
    grid = [[EMPTY if ch == "." else ch.upper() for ch in row] for row in rows]
    return Board.from_grid(grid)


def _load_board(rows):
    try:
        return parse_rows(rows)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_move(args):
    """Suggest a move."""
    from .bots.dispatcher import StrategyDispatcher

    board = _load_board(args.rows)
    config = _rule_config(args)
    dispatcher = StrategyDispatcher(seed=args.seed)
    decision = dispatcher.decide(
        board,
        args.difficulty,
        args.player,
        bounce_enabled=config.bounce_enabled,
        missing_teeth_enabled=config.missing_teeth_enabled,
        wrap_enabled=config.wrap_enabled,
    )

    if decision.move is None:
        print("Board is full")
        return
    print(f"{args.player} plays ({decision.move.row}, {decision.move.col})")
    print(f"Reason: {decision.explanation}")


def cmd_status(args):
    """Report win/draw status."""
    from .engine_core.path_rules import PathRules

    board = _load_board(args.rows)
    if args.path:
        status = PathRules().check_game_status(board)
    else:
        status = LineRules(_rule_config(args)).check_game_status(board)

    if status.winner:
        print(f"{status.winner} wins: {status.winning_cells}")
        if status.bounce_index >= 0:
            print(f"Bounces at path index {status.bounce_index}"
                  + (f" and {status.second_bounce_index}" if status.second_bounce_index >= 0 else ""))
    elif status.is_draw:
        print("Draw")
    else:
        print("In progress")


def cmd_selfplay(args):
    """Play difficulty against difficulty."""
    from .bots.dispatcher import StrategyDispatcher

    config = _rule_config(args)
    rules = LineRules(config)
    dispatcher = StrategyDispatcher(seed=args.seed)
    difficulties = {PLAYER_X: args.x_difficulty, PLAYER_O: args.o_difficulty}
    tally = {PLAYER_X: 0, PLAYER_O: 0, "draw": 0}

    for game in range(1, args.games + 1):
        board = Board(args.size)
        player = PLAYER_X
        status = rules.check_game_status(board)
        while not status.is_over:
            move = dispatcher.get_move(
                board,
                difficulties[player],
                player,
                bounce_enabled=config.bounce_enabled,
                missing_teeth_enabled=config.missing_teeth_enabled,
                wrap_enabled=config.wrap_enabled,
            )
            board.place(move.row, move.col, player)
            status = rules.check_game_status(board)
            player = PLAYER_O if player == PLAYER_X else PLAYER_X

        tally[status.winner or "draw"] += 1
        print(f"Game {game}: {status.winner + ' wins' if status.winner else 'draw'}")
        print(board)
        print()

    print(f"X ({args.x_difficulty}): {tally[PLAYER_X]}  "
          f"O ({args.o_difficulty}): {tally[PLAYER_O]}  draws: {tally['draw']}")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("kalida.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
