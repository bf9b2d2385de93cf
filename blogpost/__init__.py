from blogpost.main import app

__all__ = ["app"]
