"""
Persistence for exposé drafts
"""
from .store import ExposeStore, DuplicateFileNameError, ExposeValidationError, generate_file_name

__all__ = ['ExposeStore', 'DuplicateFileNameError', 'ExposeValidationError', 'generate_file_name']
