"""Shared parsing helpers for the engine and its HTTP adapter."""


def normalize_key(value) -> str:
    """Fold a raw status / role literal onto the snake_case vocabulary.

    "Pending-Sign-Off" -> "pending_sign_off", " it lead " -> "it_lead".
    """
    return str(value).strip().lower().replace("-", "_").replace(" ", "_")


def get_field(data: dict, snake: str, camel: str | None = None, default=None):
    """Read ``snake`` or its camelCase spelling from a JSON-shaped dict."""
    if snake in data:
        return data[snake]
    if camel and camel in data:
        return data[camel]
    return default
