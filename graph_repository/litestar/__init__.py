from .app import create_app
from .pagination import ConnectionArgs, apply_connection_args, provide_connection_args
from .repository import provide_repo, provide_session

__all__ = [
    'ConnectionArgs',
    'apply_connection_args',
    'create_app',
    'provide_connection_args',
    'provide_repo',
    'provide_session',
]
