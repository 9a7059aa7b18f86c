from apihub.models.note import Note
from apihub.models.todo import Todo
from apihub.models.token import Token
from apihub.models.url import Url
from apihub.models.user import User

__all__ = [
    "Note",
    "Todo",
    "Token",
    "Url",
    "User",
]
