import pytest

from app.core.roles import Role, at_least, rank


def test_rank_is_strictly_increasing():
    assert rank(Role.VIEWER) < rank(Role.EDITOR) < rank(Role.OWNER)


@pytest.mark.parametrize("value", ["ADMIN", "", "viewer", None])
def test_unknown_role_ranks_zero(value):
    assert rank(value) == 0


def test_rank_accepts_plain_strings():
    assert rank("EDITOR") == rank(Role.EDITOR)


def test_at_least_is_monotonic():
    roles = [Role.VIEWER, Role.EDITOR, Role.OWNER]
    for i, role in enumerate(roles):
        for j, minimum in enumerate(roles):
            assert at_least(role, minimum) is (i >= j)


def test_unknown_role_never_reaches_viewer():
    assert not at_least("GUEST", Role.VIEWER)
