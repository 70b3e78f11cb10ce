"""Flask dashboard for exposé drafts"""
from .app import create_app, api_error_handler

__all__ = ['create_app', 'api_error_handler']
