# /hms/utils/helpers.py
import secrets


def random_color_code():
    """Random hex color used for avatar placeholders."""
    return f"#{secrets.randbelow(0xFFFFFF + 1):06x}"


def page_arg(args, name='page'):
    """Positive page number from a query string, defaulting to 1."""
    try:
        page = int(args.get(name, 1))
    except (TypeError, ValueError):
        return 1
    return page if page > 0 else 1
