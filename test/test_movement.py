"""
Hop-distance tests.
"""

from snubwar.engine.movement import UNREACHABLE, calculate_distance, faces_within


def test_distance_to_self_is_zero(board):
    for face_id in (0, 40, 80, 91):
        assert calculate_distance(face_id, face_id, board.adjacency) == 0


def test_neighbors_are_one_hop(board):
    for face_id in (0, 17, 85):
        for other in board.neighbors(face_id):
            assert calculate_distance(face_id, other, board.adjacency) == 1


def test_distance_is_symmetric(board):
    for a, b in [(0, 91), (5, 60), (80, 33), (12, 13)]:
        assert calculate_distance(a, b, board.adjacency) == calculate_distance(b, a, board.adjacency)


def test_triangle_inequality(board):
    samples = [0, 7, 22, 45, 63, 80, 88]
    for a in samples:
        for b in samples:
            for c in samples:
                ab = calculate_distance(a, b, board.adjacency)
                bc = calculate_distance(b, c, board.adjacency)
                ac = calculate_distance(a, c, board.adjacency)
                assert ac <= ab + bc


def test_board_is_connected(board):
    assert len(faces_within(0, 100, board.adjacency)) == 92


def test_opposite_pentagons(board):
    assert calculate_distance(80, 91, board.adjacency) == 9


def test_unreachable():
    adjacency = {0: {1}, 1: {0}, 2: set()}
    assert calculate_distance(0, 2, adjacency) == UNREACHABLE
    assert calculate_distance(0, 99, adjacency) == UNREACHABLE


def test_faces_within_matches_distance(board):
    reachable = faces_within(80, 3, board.adjacency)
    assert reachable[80] == 0
    assert all(d <= 3 for d in reachable.values())
    for face_id, d in reachable.items():
        assert calculate_distance(80, face_id, board.adjacency) == d
    assert faces_within(80, 0, board.adjacency) == {80: 0}
