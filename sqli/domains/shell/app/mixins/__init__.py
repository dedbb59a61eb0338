"""Mixins for the shell controller."""

from .autocomplete import AutocompleteMixin
from .connection import ConnectionMixin
from .navigation import NavigationMixin
from .query import QueryMixin
from .results import ResultsMixin
from .sidebar import SidebarMixin
from .templates import TemplateMixin

__all__ = [
    "AutocompleteMixin",
    "ConnectionMixin",
    "NavigationMixin",
    "QueryMixin",
    "ResultsMixin",
    "SidebarMixin",
    "TemplateMixin",
]
