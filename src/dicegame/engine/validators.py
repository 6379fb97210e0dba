"""
Second Chance Dice - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
"""

from typing import Sequence

from dicegame.engine.base import DIE_FACES, ROSTER_SIZE


MAX_DICE = 5


def validate_dice_values(
    values: Sequence[int],
    min_count: int = 1,
    max_count: int | None = MAX_DICE
) -> tuple[int, ...]:
    """
    Validate and normalize dice values.

    Args:
        values: Sequence of dice values to validate
        min_count: Minimum number of dice required
        max_count: Maximum number of dice allowed (None = no limit)

    Returns:
        Validated values as a tuple

    Raises:
        ValueError: If validation fails
    """
    values_tuple = tuple(values)
    count = len(values_tuple)

    if count < min_count:
        raise ValueError(f"At least {min_count} dice required, got {count}.")

    if max_count is not None and count > max_count:
        raise ValueError(f"At most {max_count} dice allowed, got {count}.")

    for i, value in enumerate(values_tuple):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Die value at index {i} must be an integer, got {type(value).__name__}.")
        if not (1 <= value <= DIE_FACES):
            raise ValueError(
                f"Die value at index {i} is {value}, must be between 1 and {DIE_FACES}."
            )

    return values_tuple


def validate_player_count(count: int) -> int:
    """
    Validate number of human players.

    Args:
        count: Number of human players

    Returns:
        Validated count

    Raises:
        ValueError: If count is not 1-4
    """
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError(f"Player count must be an integer, got {type(count).__name__}.")

    if not (1 <= count <= ROSTER_SIZE):
        raise ValueError(f"Player count must be 1-{ROSTER_SIZE}, got {count}.")

    return count


def validate_dice_count(count: int) -> int:
    """
    Validate number of dice rolled per turn.

    Raises:
        ValueError: If count is not 1-5
    """
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError(f"Dice count must be an integer, got {type(count).__name__}.")

    if not (1 <= count <= MAX_DICE):
        raise ValueError(f"Dice count must be 1-{MAX_DICE}, got {count}.")

    return count


def validate_target_score(score: int) -> int:
    """
    Validate the win value (round count or target score).

    Args:
        score: Target to validate

    Returns:
        Validated target

    Raises:
        ValueError: If the target is not a positive integer
    """
    if not isinstance(score, int) or isinstance(score, bool):
        raise ValueError(f"Win value must be an integer, got {type(score).__name__}.")

    if score <= 0:
        raise ValueError(f"Win value must be positive, got {score}.")

    return score


def validate_player_names(names: Sequence[str]) -> tuple[str, ...]:
    """
    Validate the names of the fixed four-seat roster.

    Raises:
        ValueError: If there are not exactly four non-blank names
    """
    names_tuple = tuple(names)
    if len(names_tuple) != ROSTER_SIZE:
        raise ValueError(
            f"Exactly {ROSTER_SIZE} player names required, got {len(names_tuple)}."
        )

    for i, name in enumerate(names_tuple):
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Player name at index {i} must be a non-empty string.")

    return tuple(name.strip() for name in names_tuple)
