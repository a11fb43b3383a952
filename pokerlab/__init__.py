"""
pokerlab: computational core for a poker study platform

Hand evaluation, Monte Carlo equity simulation, 13x13 starting-hand
range encoding and Independent Chip Model (ICM) tournament equity.
"""

__version__ = "0.1.0"
