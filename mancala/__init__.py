# -*- coding: utf-8 -*-
"""
Kalah (Mancala with captures and extra turns) rules engine.

Submodules
----------
core : Game state, sowing rules and the native end of game check
envs : Stateful environment playing one game move after move
"""
