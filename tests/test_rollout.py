"""Tests for the random-rollout search."""

import random
import threading
import time

import pytest

from mcchess.engine.evaluation import evaluate
from mcchess.engine.rollout import RolloutSearch, SearchResult
from mcchess.game.rules import generate_legal_moves, is_checkmate
from mcchess.game.state import Board, Move, NO_MOVE, Player

from conftest import SCHOLARS_MATE


class TestRolloutSearch:
    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            RolloutSearch(max_depth=0)
        with pytest.raises(ValueError):
            RolloutSearch(time_budget=-1)

    def test_returns_legal_move(self):
        board = Board()
        search = RolloutSearch(time_budget=30.0, seed=0)
        result = search.search(board, max_rollouts=5)
        assert result.move in generate_legal_moves(board)
        assert result.rollouts == 5
        assert not result.fallback
        assert set(result.scores) <= set(generate_legal_moves(board))

    def test_does_not_mutate_board(self):
        board = Board()
        board.make_move(Move(6, 4, 4, 4))
        before = board.snapshot()
        RolloutSearch(seed=1).search(board, max_rollouts=5)
        assert board.snapshot() == before
        assert board.current_player == Player.BLACK
        assert board.en_passant == (5, 4)

    def test_single_legal_move(self, single_move_board):
        only = Move(4, 7, 3, 7)
        assert generate_legal_moves(single_move_board) == [only]
        for budget in (0.0, 0.01, 1.0):
            result = RolloutSearch(time_budget=budget).search(single_move_board)
            assert result.move == only
        # Even with a deadline already in the past
        past = time.monotonic() - 10
        assert RolloutSearch().search(single_move_board, deadline=past).move == only

    def test_no_legal_moves_returns_sentinel(self, stalemate_board):
        result = RolloutSearch(time_budget=0.1).search(stalemate_board)
        assert result.move is NO_MOVE
        assert not result.found

    def test_checkmated_side_has_no_move(self):
        board = Board()
        from mcchess.game.notation import parse_move
        for text in SCHOLARS_MATE:
            board.make_move(parse_move(text, board.current_player))
        assert RolloutSearch(time_budget=0.1).best_move(board) is NO_MOVE

    def test_expired_deadline_falls_back_to_random_move(self):
        board = Board()
        result = RolloutSearch(seed=3).search(board, deadline=time.monotonic() - 1)
        assert result.fallback
        assert result.rollouts == 0
        assert result.move in generate_legal_moves(board)

    def test_cancel_stops_search(self):
        board = Board()
        cancel = threading.Event()
        cancel.set()
        start = time.monotonic()
        result = RolloutSearch(time_budget=30.0, seed=4).search(board, cancel=cancel)
        assert time.monotonic() - start < 5.0
        assert result.fallback
        assert result.move in generate_legal_moves(board)

    def test_deadline_respected(self):
        board = Board()
        start = time.monotonic()
        result = RolloutSearch(time_budget=0.3, seed=5).search(board)
        # One rollout may overrun the deadline, but not by much
        assert time.monotonic() - start < 5.0
        assert result.move in generate_legal_moves(board)

    def test_white_takes_hanging_queen(self, make_board):
        board = make_board({
            (7, 0): 6,    # White king a1
            (4, 0): 2,    # White rook a4
            (4, 5): -5,   # Black queen f4
            (0, 7): -6,   # Black king h8
        })
        search = RolloutSearch(max_depth=1, time_budget=60.0, seed=7)
        result = search.search(board, max_rollouts=300)
        assert result.move == Move(4, 0, 4, 5)
        assert result.scores[result.move] > 0

    def test_black_takes_hanging_queen(self, make_board):
        board = make_board({
            (0, 0): -6,   # Black king a8
            (3, 0): -2,   # Black rook a5
            (3, 5): 5,    # White queen f5
            (7, 7): 6,    # White king h1
        }, player=Player.BLACK)
        search = RolloutSearch(max_depth=1, time_budget=60.0, seed=7)
        result = search.search(board, max_rollouts=300)
        assert result.move == Move(3, 0, 3, 5)
        assert result.scores[result.move] < 0

    def test_seeded_search_is_reproducible(self):
        board = Board()
        a = RolloutSearch(max_depth=3, time_budget=30.0, seed=11).search(board, max_rollouts=10)
        b = RolloutSearch(max_depth=3, time_budget=30.0, seed=11).search(board, max_rollouts=10)
        assert a.move == b.move
        assert a.scores == b.scores


class TestSelection:
    def test_ties_go_to_first_inserted(self):
        m1, m2 = Move(6, 0, 5, 0), Move(6, 1, 5, 1)
        scores = {m1: 10, m2: 10}
        assert RolloutSearch._select(scores, Player.WHITE) == m1

    def test_white_maximises_black_minimises(self):
        m1, m2, m3 = Move(6, 0, 5, 0), Move(6, 1, 5, 1), Move(6, 2, 5, 2)
        scores = {m1: 5, m2: 50, m3: -20}
        assert RolloutSearch._select(scores, Player.WHITE) == m2
        assert RolloutSearch._select(scores, Player.BLACK) == m3


class TestSearchResult:
    def test_found(self):
        assert SearchResult(Move(6, 4, 4, 4)).found
        assert not SearchResult(NO_MOVE).found


class TestRollout:
    def test_each_ply_is_scored(self):
        board = Board()
        board.make_move(Move(6, 4, 4, 4))
        root_moves = generate_legal_moves(board)

        # Replay the rollout by hand with an identically seeded generator
        replay = random.Random(21)
        first = replay.choice(root_moves)
        sim = board.copy()
        sim.make_move(first)
        after_first = evaluate(sim)
        sim.make_move(replay.choice(generate_legal_moves(sim)))
        after_second = evaluate(sim)

        search = RolloutSearch(max_depth=2, rng=random.Random(21))
        move, total = search._rollout(board.copy(), root_moves)
        assert move == first
        assert total == after_first + after_second

    def test_rollout_stops_at_mate(self, make_board):
        board = make_board({
            (7, 0): 5,    # White queen a1
            (7, 7): 6,    # White king h1
            (0, 7): -6,   # Black king h8
            (1, 6): -1,   # Black pawn g7
            (1, 7): -1,   # Black pawn h7
        })
        mate = Move(7, 0, 0, 0)
        after_mate = board.copy()
        after_mate.make_move(mate)
        assert is_checkmate(after_mate, Player.BLACK)
        mate_score = evaluate(after_mate)

        search = RolloutSearch(max_depth=8, time_budget=60.0, seed=13)
        result = search.search(board, max_rollouts=300)
        # Every rollout through the mate is credited a single evaluation
        assert mate in result.scores
        assert result.scores[mate] > 0
        assert result.scores[mate] % mate_score == 0
        assert search._rollout(board.copy(), [mate]) == (mate, mate_score)
