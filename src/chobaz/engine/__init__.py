"""Deterministic, headless rules engine for Chobaz.

IMPORTANT: This package must never import presentation code.
"""

from .actions import (
    Action,
    BidAction,
    DealAction,
    EndGameAction,
    PlayCardAction,
    ResetRoundAction,
    RevealPartnerAction,
    SealTrickAction,
    SelectTrumpAction,
    StartGameAction,
)
from .ai import BotSpec, ai_take_turn, choose_action
from .match import GameConfig, GameState, StepResult, new_game, replay, step
from .rules import legal_plays, resolve_trick_winner
from .types import Card, Phase, Seat, Suit, Team

__all__ = [
    "Action",
    "BidAction",
    "BotSpec",
    "Card",
    "DealAction",
    "EndGameAction",
    "GameConfig",
    "GameState",
    "Phase",
    "PlayCardAction",
    "ResetRoundAction",
    "RevealPartnerAction",
    "SealTrickAction",
    "Seat",
    "SelectTrumpAction",
    "StartGameAction",
    "StepResult",
    "Suit",
    "Team",
    "ai_take_turn",
    "choose_action",
    "legal_plays",
    "new_game",
    "replay",
    "resolve_trick_winner",
    "step",
]
