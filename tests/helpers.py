# tests/helpers.py


def signup_payload(email: str = "a@x.com", password: str = "secret1", **overrides) -> dict:
    payload = {
        "firstName": "Alice",
        "lastName": "Smith",
        "emailAddress": email,
        "password": password,
    }
    payload.update(overrides)
    return payload
