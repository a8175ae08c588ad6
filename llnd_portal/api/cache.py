from fastapi import Request


def request_path_key(func, namespace: str = "", *, request: Request = None, response=None, args=(), kwargs=None) -> str:
    """Cache key from the URL path alone; the injected API client differs on every call."""
    path = request.url.path if request is not None else func.__name__
    return f"{namespace}:{path}"
