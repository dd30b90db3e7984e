import enum


class Role(str, enum.Enum):
    VIEWER = "VIEWER"
    EDITOR = "EDITOR"
    OWNER = "OWNER"


_RANK = {
    Role.VIEWER: 1,
    Role.EDITOR: 2,
    Role.OWNER: 3,
}


def rank(role) -> int:
    """Privilege rank; anything that is not a known role ranks 0."""
    try:
        return _RANK[Role(role)]
    except ValueError:
        return 0


def at_least(role, minimum: Role) -> bool:
    return rank(role) >= rank(minimum)
