"""Qt views. Importing this package requires PyQt6."""

from .summary_list_view import SummaryListView, SummaryRow  # noqa: F401
from .command_bar import CommandBar, FilterBar  # noqa: F401
from .primary_views import AddView, DetailView, HelpView, ItemForm, OptionsView  # noqa: F401
from .main_window import MainWindow  # noqa: F401

__all__ = [
    "SummaryListView",
    "SummaryRow",
    "CommandBar",
    "FilterBar",
    "AddView",
    "DetailView",
    "HelpView",
    "ItemForm",
    "OptionsView",
    "MainWindow",
]
