"""Reward Pool: proportional staking rewards with O(1) accounting."""

__version__ = "0.1.0"
