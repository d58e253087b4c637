from .password import check_password, hash_password
from .tokens import keys_match, new_session_token

__all__ = ["check_password", "hash_password", "keys_match", "new_session_token"]
