from .logging import configure_logging, setup_logging

__all__ = ['configure_logging', 'setup_logging']
