"""Constants and helpers shared by test modules."""

USER_A = "11111111-aaaa-4aaa-8aaa-111111111111"
USER_B = "22222222-bbbb-4bbb-8bbb-222222222222"


def as_user(user_id: str) -> dict[str, str]:
    """Headers selecting the caller for one request."""
    return {"X-Test-User": user_id}
