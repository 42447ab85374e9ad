"""Basic content moderation for review comments."""

SPAM_KEYWORDS = [
    "buy now", "click here", "free money", "earn cash",
    "http://", "https://", "www.",
]


def check_content(text: str) -> dict:
    """Scan text for spam phrases and bare URLs (case-insensitive).

    Returns:
        Dict with 'spam' bool and optional 'reason' string.
    """
    text_lower = (text or "").lower()

    for keyword in SPAM_KEYWORDS:
        if keyword in text_lower:
            return {
                "spam": True,
                "reason": f"Content contains blocked phrase: '{keyword}'.",
            }

    return {"spam": False, "reason": None}
