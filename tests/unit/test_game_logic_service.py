"""
Game Logic Service Unit Tests

Tests secret generation, guess scoring, guess validation and win detection.
"""

import random
import pytest

from mastermind.core.colors import Color
from mastermind.core.errors import ErrorCode, ErrorKind, InvalidArgumentError
from mastermind.core.models import Feedback
from mastermind.services.game_logic_service import GameLogicService
from tests.factories.lobby_factory import CodewordFactory, R, B, G, Y, P, C


class TestGenerateSecret:
    """Test secret generation"""

    def setup_method(self):
        self.service = GameLogicService()

    @pytest.mark.parametrize("slot_count", [1, 3, 4, 6, 8])
    def test_secret_has_requested_length(self, slot_count):
        secret = self.service.generate_secret(slot_count)
        assert len(secret) == slot_count

    def test_secret_uses_known_colors(self):
        for _ in range(20):
            secret = self.service.generate_secret(4)
            assert all(isinstance(color, Color) for color in secret)

    @pytest.mark.parametrize("slot_count", [0, -1, -10])
    def test_non_positive_slot_count_rejected(self, slot_count):
        with pytest.raises(InvalidArgumentError) as exc_info:
            self.service.generate_secret(slot_count)
        assert exc_info.value.code == ErrorCode.INVALID_SLOT_COUNT
        assert exc_info.value.kind == ErrorKind.INVALID_ARGUMENT

    def test_secrets_are_not_constant(self):
        secrets = {self.service.generate_secret(4) for _ in range(50)}
        assert len(secrets) > 1

    def test_secret_is_immutable_tuple(self):
        assert isinstance(self.service.generate_secret(4), tuple)


class TestEvaluateGuess:
    """Test exact/partial scoring"""

    def setup_method(self):
        self.service = GameLogicService()

    def test_perfect_match(self):
        assert self.service.evaluate_guess((R, B, G, Y), (R, B, G, Y)) == Feedback(4, 0)

    def test_no_matches(self):
        assert self.service.evaluate_guess((R, B, G, Y), (P, C, P, C)) == Feedback(0, 0)

    def test_all_partial_matches(self):
        assert self.service.evaluate_guess((R, B, G, Y), (B, G, Y, R)) == Feedback(0, 4)

    def test_mixed_matches(self):
        assert self.service.evaluate_guess((R, B, G, Y), (R, G, B, P)) == Feedback(1, 2)

    def test_duplicate_colors_in_guess_capped_by_secret(self):
        assert self.service.evaluate_guess((R, B, G, Y), (R, R, R, R)) == Feedback(1, 0)

    def test_duplicate_colors_in_secret(self):
        assert self.service.evaluate_guess((R, R, B, G), (R, B, R, P)) == Feedback(1, 2)

    def test_duplicate_partial_only_counted_once(self):
        # Only one yellow in the secret to pair with the two yellows guessed
        assert self.service.evaluate_guess((Y, B, B, B), (R, Y, Y, R)) == Feedback(0, 1)

    def test_inputs_are_not_mutated(self):
        secret = [R, B, G, Y]
        guess = [R, G, B, P]
        self.service.evaluate_guess(secret, guess)
        assert secret == [R, B, G, Y]
        assert guess == [R, G, B, P]

    def test_self_match_for_random_codewords(self):
        rng = random.Random(7)
        for _ in range(50):
            slot_count = rng.randint(1, 8)
            secret = CodewordFactory.random_codeword(slot_count, seed=rng.random())
            assert self.service.evaluate_guess(secret, secret) == Feedback(slot_count, 0)

    def test_partial_count_symmetric_under_swap(self):
        rng = random.Random(11)
        for _ in range(200):
            secret = CodewordFactory.random_codeword(5, seed=rng.random())
            guess = CodewordFactory.random_codeword(5, seed=rng.random())
            forward = self.service.evaluate_guess(secret, guess)
            backward = self.service.evaluate_guess(guess, secret)
            assert forward.partial == backward.partial
            assert forward.exact == backward.exact

    def test_no_slot_counted_twice(self):
        rng = random.Random(3)
        for _ in range(200):
            secret = CodewordFactory.random_codeword(4, seed=rng.random())
            guess = CodewordFactory.random_codeword(4, seed=rng.random())
            feedback = self.service.evaluate_guess(secret, guess)
            assert 0 <= feedback.exact <= 4
            assert 0 <= feedback.partial <= 4 - feedback.exact

    @pytest.mark.parametrize("secret,guess", [
        (None, (R, B, G, Y)),
        ((R, B, G, Y), None),
        (None, None),
    ])
    def test_missing_inputs_rejected(self, secret, guess):
        with pytest.raises(InvalidArgumentError):
            self.service.evaluate_guess(secret, guess)

    @pytest.mark.parametrize("guess", [(R, B), (R, B, G, Y, P)])
    def test_mismatched_lengths_rejected(self, guess):
        with pytest.raises(InvalidArgumentError, match="same length"):
            self.service.evaluate_guess((R, B, G, Y), guess)


class TestGuessValidationAndWinning:
    """Test is_valid_guess, is_winning_guess and color helpers"""

    def setup_method(self):
        self.service = GameLogicService()

    def test_winning_guess(self):
        assert self.service.is_winning_guess(Feedback(4, 0), 4) is True

    @pytest.mark.parametrize("feedback", [Feedback(3, 1), Feedback(0, 4), Feedback(2, 0)])
    def test_non_winning_guess(self, feedback):
        assert self.service.is_winning_guess(feedback, 4) is False

    def test_valid_guess(self):
        assert self.service.is_valid_guess((R, B, G, Y), 4) is True

    def test_invalid_guesses(self):
        assert self.service.is_valid_guess(None, 4) is False
        assert self.service.is_valid_guess((R, B), 4) is False
        assert self.service.is_valid_guess((R, None, G, Y), 4) is False
        assert self.service.is_valid_guess((R, 'blue', G, Y), 4) is False

    @pytest.mark.parametrize("slot_count", [3, 4, 5, 6])
    def test_valid_guess_for_different_slot_counts(self, slot_count):
        assert self.service.is_valid_guess(tuple([R] * slot_count), slot_count) is True

    def test_available_colors_in_stable_order(self):
        assert self.service.get_available_colors() == [R, B, G, Y, P, C]
        assert self.service.get_available_colors() == self.service.get_available_colors()

    def test_parse_codeword_accepts_names_in_any_case(self):
        assert self.service.parse_codeword(['red', 'BLUE', ' Green ', Color.YELLOW]) == (R, B, G, Y)

    def test_parse_codeword_rejects_unknown_color(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            self.service.parse_codeword(['red', 'orange'])
        assert exc_info.value.code == ErrorCode.INVALID_COLOR

    def test_parse_codeword_rejects_none(self):
        with pytest.raises(InvalidArgumentError):
            self.service.parse_codeword(None)
