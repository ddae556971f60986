"""
Shared fixtures.
"""

import pytest

from helpers import farthest_face, make_state
from snubwar.engine.state import Rover
from snubwar.engine.topology import get_topology


@pytest.fixture
def board():
    return get_topology()


@pytest.fixture
def duel():
    """Red rover on face 0, green rover as far away as the board allows."""
    return make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Rover(id="green_rover_001", player="green", face_id=farthest_face(0)),
    )
