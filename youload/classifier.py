"""Short-form classification from intrinsic media properties."""

SHORT_FORM_MAX_SECONDS = 60


def is_short_form(duration_seconds: float, is_vertical: bool) -> bool:
    """A video is short-form when it is vertical and at most 60 seconds long."""
    return bool(is_vertical) and duration_seconds <= SHORT_FORM_MAX_SECONDS
