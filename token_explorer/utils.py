import math


def format_percentage(value: float, decimals: int = 2) -> str:
    return f"{value * 100:.{decimals}f}%"


def format_time(seconds: float) -> str:
    """Форматирует длительность: 12.3s или 2m 5s."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = math.floor(seconds / 60)
    remaining_seconds = seconds % 60
    return f"{minutes}m {remaining_seconds:.0f}s"


def estimate_token_count(text: str) -> int:
    # ~4 символа на токен
    return math.ceil(len(text) / 4)
