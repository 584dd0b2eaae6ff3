"""User class for account identity."""


class User:
    """A registered account. Passwords are kept in plain text."""

    def __init__(self, id: str, name: str, username: str, password: str):
        self.id = id
        self.name = name
        self.username = username
        self.password = password

    def matches_username(self, username: str) -> bool:
        """Usernames compare case-insensitively."""
        return self.username.lower() == username.lower()
