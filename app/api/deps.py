from app.core.database import get_db  # noqa: F401
from app.core.auth import get_current_user  # noqa: F401
