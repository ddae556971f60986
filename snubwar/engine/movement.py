"""
Distance calculations over the face adjacency graph.
"""

from collections import deque
from collections.abc import Mapping, Set

# Returned by calculate_distance when no path exists.
UNREACHABLE = -1


def calculate_distance(
    start: int,
    end: int,
    adjacency: Mapping[int, Set[int]],
) -> int:
    """
    Calculate the minimum number of hops between two faces using BFS.

    Args:
        start: Starting face id
        end: Destination face id
        adjacency: Face adjacency graph

    Returns:
        Minimum distance, 0 if start == end, or UNREACHABLE (-1) if there is no path
    """
    if start == end:
        return 0

    queue = deque([(start, 0)])
    visited = {start}

    while queue:
        face_id, distance = queue.popleft()

        for adjacent_id in adjacency.get(face_id, ()):
            if adjacent_id == end:
                return distance + 1

            if adjacent_id not in visited:
                visited.add(adjacent_id)
                queue.append((adjacent_id, distance + 1))

    return UNREACHABLE


def faces_within(
    start: int,
    max_distance: int,
    adjacency: Mapping[int, Set[int]],
) -> dict[int, int]:
    """
    All faces reachable from start in at most max_distance hops.
    Returns face_id -> distance (start itself included at distance 0).
    """
    reachable = {start: 0}
    queue = deque([start])

    while queue:
        face_id = queue.popleft()
        distance = reachable[face_id]
        if distance >= max_distance:
            continue
        for adjacent_id in adjacency.get(face_id, ()):
            if adjacent_id not in reachable:
                reachable[adjacent_id] = distance + 1
                queue.append(adjacent_id)

    return reachable
