"""
Key case conversion for record hydration.
camelCase is the naming convention record keys are matched in; it is also
the alias_generator of every Hydratable, so field aliases and normalized
keys always agree.
"""


def to_camel_key(s: str) -> str:
    """
    Normalize a source key to camelCase (first letter lower).
    Underscores and spaces split words; only the first letter of each word is
    upper-cased, so keys already in camelCase come back unchanged.
    """
    words = s.replace("_", " ").split(" ")
    joined = "".join(w[:1].upper() + w[1:] for w in words)
    return joined[:1].lower() + joined[1:]
