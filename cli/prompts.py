def confirm(message: str, assume_yes: bool = False) -> bool:
    """Ask a yes/no question. Anything but "yes" counts as no."""
    if assume_yes:
        return True
    return input(f"\n{message} (yes/no): ").strip().lower() == "yes"


def format_change(change: float) -> str:
    """Render a percentage change as "+12.5%" or "-3.0%"."""
    sign = "+" if change >= 0 else "-"
    return f"{sign}{abs(change):.1f}%"
