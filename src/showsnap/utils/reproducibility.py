"""
Utilities for reproducible seat maps and seed runs.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


def get_random_state(seed: Optional[int] = None) -> np.random.RandomState:
    """
    Get a random state for functions that accept one.

    Args:
        seed: Seed for the random state. None gives a fresh, unseeded state.

    Returns:
        numpy.random.RandomState
    """
    if seed is not None:
        logger.info(f"Using random seed {seed}")
    return np.random.RandomState(seed)
