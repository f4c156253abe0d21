#!/usr/bin/env python3
"""Interactive CLI for playing against the rollout search.

Usage:
    python scripts/play.py                         # Human (White) vs rollout bot
    python scripts/play.py --bot-vs-bot            # Rollout bot vs rollout bot
    python scripts/play.py --engine /usr/games/stockfish --games 3
                                                   # UCI engine (White) vs rollout bot
    python scripts/play.py --config configs/default.yaml --time 2 --depth 6
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mcchess.config import MatchConfig, load_config
from mcchess.engine.agents import Agent, RolloutAgent, UCIEngineAgent
from mcchess.engine.rollout import RolloutSearch
from mcchess.engine.uci import EngineError, UCIEngine
from mcchess.game.board import render_board
from mcchess.game.notation import move_to_uci, parse_move
from mcchess.game.rules import generate_legal_moves
from mcchess.game.state import NO_MOVE, Move
from mcchess.session.game_session import GameSession, GameStatus, IllegalMoveError
from mcchess.session.match import Match

logger = logging.getLogger("mcchess.play")


class HumanAgent(Agent):
    """Reads moves from the terminal."""

    name = "human"

    def get_move(self, board, history=(), cancel=None) -> Move:
        legal = generate_legal_moves(board)
        if not legal:
            return NO_MOVE
        print(f"\n{board.current_player.display_name}'s turn. Legal moves:")
        print("  " + " ".join(sorted(move_to_uci(m) for m in legal)))
        print("Enter a move (e.g. e2e4, 0-0) or 'q' to quit:")

        while True:
            inp = input("> ").strip()
            if inp.lower() == "q":
                return NO_MOVE
            try:
                move = parse_move(inp, board.current_player)
            except ValueError:
                print("Invalid input. Enter a move like e2e4.")
                continue
            if move in legal:
                return move
            print("That move is not legal in this position.")


def display(session: GameSession, move: Move):
    print()
    print(f"Played: {session.history[-1]}")
    print(render_board(session.snapshot(),
                       current_player=session.current_player.display_name))
    if session.is_in_check() and session.status() == GameStatus.ONGOING:
        print("Check!")


def make_rollout_agent(config: MatchConfig) -> RolloutAgent:
    return RolloutAgent(RolloutSearch(
        max_depth=config.search.max_depth,
        time_budget=config.search.time_budget,
        seed=config.search.seed,
    ))


def main():
    parser = argparse.ArgumentParser(description="Play chess against the rollout search")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a YAML match config")
    parser.add_argument("--bot-vs-bot", action="store_true",
                        help="Watch the rollout bot play itself")
    parser.add_argument("--engine", type=str, default=None, metavar="PATH",
                        help="UCI engine executable to play White against the rollout bot")
    parser.add_argument("--games", type=int, default=None,
                        help="Number of games to play")
    parser.add_argument("--time", type=float, default=None,
                        help="Rollout search time budget per move (seconds)")
    parser.add_argument("--depth", type=int, default=None,
                        help="Half-moves per rollout")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for the rollout search")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    args = parser.parse_args()

    config = load_config(args.config)
    if args.time is not None:
        config.search.time_budget = args.time
    if args.depth is not None:
        config.search.max_depth = args.depth
    if args.seed is not None:
        config.search.seed = args.seed
    if args.engine is not None:
        config.engine.path = args.engine
    if args.games is not None:
        config.games = args.games

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    session = GameSession()
    print(render_board(session.snapshot(), current_player="White"))

    engine = None
    try:
        if config.engine.path:
            engine = UCIEngine(config.engine.path, args=config.engine.args,
                               read_timeout=config.engine.read_timeout)
            engine.start()
            for name, value in config.engine.options.items():
                engine.set_option(name, value)
            engine.new_game()
            white = UCIEngineAgent(engine, movetime_ms=config.engine.movetime_ms)
            move_pause = config.move_pause
        elif args.bot_vs_bot:
            white = make_rollout_agent(config)
            move_pause = config.move_pause
        else:
            white = HumanAgent()
            move_pause = 0.0
        black = make_rollout_agent(config)

        match = Match(white, black, session=session, move_pause=move_pause,
                      max_plies=config.max_plies, on_move=display)
        records = match.play(games=config.games)
    except EngineError as e:
        logger.error(f"Engine failure: {e}")
        sys.exit(1)
    except IllegalMoveError as e:
        logger.error(f"Game aborted: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nGame aborted.")
        return
    finally:
        if engine is not None:
            engine.stop()

    for i, record in enumerate(records, 1):
        print(f"Game {i}: {record.result} ({record.reason}) after {len(record.moves)} plies")
        print("  " + " ".join(record.moves))


if __name__ == "__main__":
    main()
