"""
Board tests: face counts, adjacency shape and HQ faces.
"""

from snubwar.engine.topology import (
    FACE_COUNT,
    PENTAGON,
    TRIANGLE,
    build_adjacency,
    face_kind,
    hq_faces,
    is_hq,
    is_valid_face,
)


def test_face_counts(board):
    assert len(board.faces) == FACE_COUNT == 92
    assert sum(1 for f in board.faces if len(f) == 3) == 80
    assert sum(1 for f in board.faces if len(f) == 5) == 12
    assert len(board.vertices) == 60


def test_edge_count(board):
    # 80 triangles * 3 + 12 pentagons * 5 sides, each edge shared by two faces
    assert board.edge_count() == 150


def test_degrees_match_face_sides(board):
    for face_id in range(FACE_COUNT):
        expected = 3 if face_kind(face_id) == TRIANGLE else 5
        assert len(board.neighbors(face_id)) == expected, face_id


def test_adjacency_is_symmetric_and_irreflexive(board):
    for face_id, adjacent in board.adjacency.items():
        assert face_id not in adjacent
        for other in adjacent:
            assert face_id in board.neighbors(other)


def test_pentagons_only_touch_triangles(board):
    for face_id in hq_faces():
        assert all(face_kind(n) == TRIANGLE for n in board.neighbors(face_id))


def test_hq_faces():
    assert hq_faces() == list(range(80, 92))
    assert is_hq(80) and is_hq(91)
    assert not is_hq(0) and not is_hq(79)
    assert face_kind(85) == PENTAGON


def test_face_zero_touches_first_pentagon(board):
    assert board.neighbors(0) == frozenset({1, 6, 80})
    assert board.are_adjacent(0, 80)
    assert not board.are_adjacent(0, 91)


def test_is_valid_face():
    assert is_valid_face(0)
    assert is_valid_face(91)
    assert not is_valid_face(92)
    assert not is_valid_face(-1)
    assert not is_valid_face("3")
    assert not is_valid_face(True)


def test_build_adjacency_needs_a_shared_edge():
    faces = [(0, 1, 2), (1, 2, 3), (3, 4, 5)]
    adjacency = build_adjacency(faces)
    assert adjacency == {0: frozenset({1}), 1: frozenset({0}), 2: frozenset()}


def test_face_center_is_vertex_mean(board):
    a, b, c = (board.vertices[i] for i in board.faces[0])
    center = board.face_center(0)
    for axis in range(3):
        assert abs(center[axis] - (a[axis] + b[axis] + c[axis]) / 3) < 1e-9


def test_to_dict(board):
    data = board.to_dict()
    assert len(data["faces"]) == 92
    assert data["faces"][80]["type"] == "pentagon"
    assert data["adjacency"]["0"] == [1, 6, 80]
    assert data["hq_faces"] == list(range(80, 92))
