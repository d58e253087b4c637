from .session import Database
from .utils import apply_dict_updates, as_utc, atomic, utc_now

__all__ = ["Database", "apply_dict_updates", "as_utc", "atomic", "utc_now"]
