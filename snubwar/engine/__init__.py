"""
Snub War Turn-Based Strategy Game Engine
Core rules engine without rendering, camera, or UI.
"""

PLAYERS = ("red", "green")

BUILDING_TYPES = ("spaceport", "factory", "drillcannon", "treasury")

ROVER_MAX_HP = 5
BUILDING_MAX_HP = 5
FORTIFICATION_HP = 1

SHOOT_RANGE = 3
# Extra shooting range for a unit standing on an HQ (pentagon) face.
HQ_RANGE_BONUS = 2

DICE_SIDES = 6
HIT_THRESHOLD = 4

DRILL_CANNON_PLANET_DESTROY_THRESHOLD = 8
