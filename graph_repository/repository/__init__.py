from .base_repo import BaseRepository

__all__ = ['BaseRepository']
