import re


def slugify(text: str) -> str:
    """
    Creates a slug used as the identity of a shipping method.
    - Lowercase
    - Alphanumeric and hyphens only
    - Replaces consecutive hyphens with single hyphen
    - Trims leading/trailing hyphens

    Example:
        >>> slugify("Express Delivery (24h)")
        'express-delivery-24h'
    """
    if not text:
        return ""

    slug = text.lower()

    # Replace non-alphanumeric with hyphen
    slug = re.sub(r'[^a-z0-9]+', '-', slug)

    # Collapse multiple hyphens
    slug = re.sub(r'-+', '-', slug)

    return slug.strip('-')
