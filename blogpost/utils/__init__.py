from blogpost.utils.helpers import host, today_str

__all__ = ["host", "today_str"]
