"""
Editor module - in-memory drafts with autosave and a navigation guard
"""

from .session import EditorSession, EditorState, NavigationChoice

__all__ = ['EditorSession', 'EditorState', 'NavigationChoice']
