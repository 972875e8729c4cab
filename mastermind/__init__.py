"""
Mastermind lobby core.

Game logic, the compatible-guess solver, and the in-memory registries that
coordinate solo games and two-player matches.
"""
