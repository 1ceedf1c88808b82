"""
Request boundary for VXA Ask.
"""

from .ask import handle_ask_request, validate_ask_body, get_intent_manager

__all__ = ['handle_ask_request', 'validate_ask_body', 'get_intent_manager']
