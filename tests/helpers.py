"""Small helpers shared by test modules."""

import base64


def basic_auth(email: str, password: str) -> str:
    credentials = base64.b64encode(f"{email}:{password}".encode()).decode()
    return f"Basic {credentials}"


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()
