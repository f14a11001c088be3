from pydantic import BaseModel


class UserContext(BaseModel):
    """The acting user, passed explicitly into every recording call."""

    user_id: str
    name: str = ""
