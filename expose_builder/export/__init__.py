"""
Export of assembled exposés
"""
from .pdf import render_pdf

__all__ = ['render_pdf']
