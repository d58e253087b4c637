from .main import create_app, prepare_database

__all__ = ["create_app", "prepare_database"]
