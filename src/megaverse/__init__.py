"""
megaverse - build a goal map of polyanets, soloons and comeths through a
remote API with bounded concurrency and jittered exponential retry.
"""

__version__ = "0.1.0"
