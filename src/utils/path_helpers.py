import re


def path_matches(path: str, allowed_paths: set[str]) -> bool:
    """Check if path matches any allowed path, handling trailing slashes.

    Returns True if:
    - path exactly matches an allowed path, OR
    - path with trailing slash added/removed matches an allowed path
    """
    if path in allowed_paths:
        return True

    if not path.endswith("/") and path + "/" in allowed_paths:
        return True

    if path.endswith("/") and path[:-1] in allowed_paths:
        return True

    return False


def path_matches_pattern(
    path: str, patterns: list[tuple[str | None, str]], method: str | None = None
) -> bool:
    """Check if path matches any regex pattern, optionally filtering by HTTP method.

    Args:
        path: The request path to check
        patterns: List of (method, pattern) tuples. method can be None to match any method.
        method: The HTTP method to check (e.g., 'GET', 'POST')
    """
    for allowed_method, pattern in patterns:
        if allowed_method is not None and method is not None:
            if allowed_method.upper() != method.upper():
                continue

        if re.match(pattern, path):
            return True
    return False
