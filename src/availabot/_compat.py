"""Optional dependency helpers."""


def require_extra(package: str, extra: str) -> None:
    """Raise ImportError telling the user which availabot extra provides *package*."""
    raise ImportError(
        f"'{package}' is required but not installed. "
        f"Install it with: pip install 'availabot[{extra}]'"
    )
