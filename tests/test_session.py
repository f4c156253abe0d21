"""Tests for the game session and the match loop."""

import logging
import threading

import pytest

from mcchess.engine.agents import Agent, RandomAgent, RolloutAgent, UCIEngineAgent
from mcchess.engine.uci import UCIEngine
from mcchess.game.board import STARTING_GRID
from mcchess.game.notation import parse_move
from mcchess.game.state import Move, NO_MOVE, Player
from mcchess.session import (
    GameSession, GameStatus, IllegalMoveError, Match, StalePositionError,
)

from conftest import SCHOLARS_MATE


class ScriptedAgent(Agent):
    """Plays a fixed list of moves, then NO_MOVE."""

    name = "scripted"

    def __init__(self, moves):
        self.moves = list(moves)
        self.calls = 0

    def get_move(self, board, history=(), cancel=None):
        if self.calls >= len(self.moves):
            return NO_MOVE
        text = self.moves[self.calls]
        self.calls += 1
        return parse_move(text, board.current_player)


class FailingAgent(Agent):
    name = "failing"

    def get_move(self, board, history=(), cancel=None):
        raise RuntimeError("boom")


class TestGameSession:
    def test_initial_state(self):
        session = GameSession()
        assert session.snapshot() == STARTING_GRID
        assert session.current_player == Player.WHITE
        assert session.ply == 0
        assert session.status() == GameStatus.ONGOING
        assert len(session.legal_moves()) == 20

    def test_play_updates_board_and_history(self):
        session = GameSession()
        session.play("e2e4")
        grid = session.snapshot()
        assert grid[4][4] == 1
        assert grid[6][4] == 0
        assert session.current_player == Player.BLACK
        assert session.history == ["e2e4"]
        session.play("e7e5")
        assert session.history_string() == "e2e4 e7e5"

    def test_illegal_move_rejected(self):
        session = GameSession()
        before = session.snapshot()
        with pytest.raises(IllegalMoveError):
            session.play("e2e5")
        with pytest.raises(IllegalMoveError):
            session.play("e7e5")  # Black piece on White's turn
        assert session.snapshot() == before
        assert session.ply == 0
        assert session.current_player == Player.WHITE

    def test_bad_notation_rejected(self):
        session = GameSession()
        with pytest.raises(ValueError):
            session.play("hello")
        with pytest.raises(IllegalMoveError):
            session.play("0000")

    def test_snapshot_is_a_copy(self):
        session = GameSession()
        copy = session.board_copy()
        copy.remove_piece(7, 3)
        assert session.snapshot()[7][3] == 5

    def test_promotion_recorded_with_suffix(self, make_board):
        session = GameSession(make_board({(7, 4): 6, (0, 7): -6, (1, 0): 1}))
        session.play("a7a8")
        assert session.history == ["a7a8q"]
        assert session.snapshot()[0][0] == 5

    def test_castling_recorded_and_logged(self, make_board, caplog):
        session = GameSession(make_board({(7, 4): 6, (7, 7): 2, (0, 4): -6}))
        with caplog.at_level(logging.DEBUG, logger="mcchess.session"):
            session.play("0-0")
        assert session.history_string() == "e1g1"
        assert "White played e1g1 (0-0)" in caplog.text
        grid = session.snapshot()
        assert grid[7][6] == 6
        assert grid[7][5] == 2

    def test_scholars_mate(self):
        session = GameSession()
        for text in SCHOLARS_MATE:
            session.play(text)
        assert session.is_in_check()
        assert session.status() == GameStatus.CHECKMATE
        assert session.is_checkmate()
        assert not session.is_stalemate()
        assert session.legal_moves() == []

    def test_stalemate_status(self, stalemate_board):
        session = GameSession(stalemate_board)
        assert session.status() == GameStatus.STALEMATE
        assert session.is_stalemate()
        assert not session.is_checkmate()

    def test_reset(self):
        session = GameSession()
        session.play("d2d4")
        session.reset()
        assert session.snapshot() == STARTING_GRID
        assert session.history == []
        assert session.current_player == Player.WHITE

    def test_stale_ply_rejected(self):
        session = GameSession()
        with pytest.raises(StalePositionError):
            session.apply(Move(6, 4, 4, 4), expected_ply=3)
        assert session.ply == 0

    def test_position_changed_during_search(self):
        session = GameSession()

        class Interrupting(Agent):
            def get_move(self, board, history=(), cancel=None):
                session.play("e2e4")
                return Move(6, 3, 4, 3)

        with pytest.raises(StalePositionError):
            session.compute_and_apply(Interrupting())
        assert session.history == ["e2e4"]


class TestAsyncMoves:
    def test_random_agent(self):
        session = GameSession()
        legal = session.legal_moves()
        request = session.request_move_async(RandomAgent(seed=0))
        move = request.wait(timeout=10)
        assert request.done.is_set()
        assert move in legal
        assert session.ply == 1
        assert session.current_player == Player.BLACK
        assert session.board_copy().piece_at(*move.to_rc) > 0

    def test_rollout_agent(self):
        session = GameSession()
        agent = RolloutAgent(time_budget=0.2, max_depth=2, seed=0)
        move = session.request_move_async(agent).wait(timeout=10)
        assert move in GameSession().legal_moves()
        assert agent.last_result is not None
        assert session.ply == 1

    def test_worker_error_propagates(self):
        session = GameSession()
        request = session.request_move_async(FailingAgent())
        with pytest.raises(RuntimeError, match="boom"):
            request.wait(timeout=10)
        assert session.ply == 0

    def test_null_move_not_applied(self, stalemate_board):
        session = GameSession(stalemate_board)
        move = session.request_move_async(RandomAgent(seed=0)).wait(timeout=10)
        assert move is NO_MOVE
        assert session.ply == 0


class TestMatch:
    def test_scholars_mate_match(self):
        white = ScriptedAgent(SCHOLARS_MATE[0::2])
        black = ScriptedAgent(SCHOLARS_MATE[1::2])
        match = Match(white, black)
        record = match.play_game()
        assert record.result == "1-0"
        assert record.reason == "checkmate"
        assert record.winner == Player.WHITE
        assert record.moves == SCHOLARS_MATE
        # The board is reset once the game is decided
        assert match.session.ply == 0
        assert match.session.snapshot() == STARTING_GRID

    def test_engine_vs_scripted(self, fake_engine_cmd):
        path, args = fake_engine_cmd
        with UCIEngine(path, args, read_timeout=5.0) as engine:
            white = UCIEngineAgent(engine, movetime_ms=10)
            black = ScriptedAgent(SCHOLARS_MATE[1::2])
            record = Match(white, black).play_game()
        assert record.result == "1-0"
        assert record.moves == SCHOLARS_MATE

    def test_no_move_ends_game(self):
        white = ScriptedAgent(["e2e4"])
        black = ScriptedAgent([])
        record = Match(white, black).play_game()
        assert record.reason == "no move"
        assert record.result == "*"
        assert record.moves == ["e2e4"]

    def test_ply_limit(self):
        match = Match(RandomAgent(seed=1), RandomAgent(seed=2), max_plies=6)
        record = match.play_game()
        assert len(record.moves) <= 6
        if record.reason == "ply limit":
            assert len(record.moves) == 6

    def test_on_move_callback(self):
        seen = []
        match = Match(ScriptedAgent(SCHOLARS_MATE[0::2]), ScriptedAgent(SCHOLARS_MATE[1::2]),
                      on_move=lambda session, move: seen.append(move))
        match.play_game()
        assert len(seen) == len(SCHOLARS_MATE)
        assert seen[-1] == Move(3, 7, 1, 5)

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        records = Match(RandomAgent(), RandomAgent()).play(games=3, cancel=cancel)
        assert len(records) == 1
        assert records[0].reason == "cancelled"
        assert records[0].moves == []

    def test_multiple_games(self):
        white = ScriptedAgent(SCHOLARS_MATE[0::2] * 2)
        black = ScriptedAgent(SCHOLARS_MATE[1::2] * 2)
        records = Match(white, black).play(games=2)
        assert [r.result for r in records] == ["1-0", "1-0"]

    def test_agent_for(self):
        white, black = RandomAgent(), RandomAgent()
        match = Match(white, black)
        assert match.agent_for(Player.WHITE) is white
        assert match.agent_for(Player.BLACK) is black
