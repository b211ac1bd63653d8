# -*- coding: utf-8 -*-
"""
Python implementation of the Kalah game.

This module provides the `Mancala` class, which keeps the position of one game and applies the players' moves.
"""

from .mancala import Mancala

__all__ = ["Mancala"]
