"""
Decks View - list of decks with creation and reload
----------------------------------------------------
"""

from typing import Callable, Optional

import flet as ft

from ..services import DeckStore, PersistenceError
from ..utils.parsing import TextParser
from .feedback import header, show_snackbar


class DeckListView:
    """
    Home view listing every deck.

    Reads copies from the store and refreshes itself through the store's
    change listener.
    """

    def __init__(
        self,
        page: ft.Page,
        store: DeckStore,
        on_open_deck: Callable[[str], None],
    ) -> None:
        """
        Initialize the deck list.

        Args:
            page: Flet page instance for updates
            store: Deck store
            on_open_deck: Called with a deck id when a deck is selected
        """
        self.page = page
        self.store = store
        self._on_open_deck = on_open_deck

        # UI References
        self._name_field: Optional[ft.TextField] = None
        self._deck_list: Optional[ft.ListView] = None
        self._unsaved_badge: Optional[ft.Container] = None

        self._container = self._build_view()
        self.store.on_change(self.refresh)

    @property
    def container(self) -> ft.Container:
        """Get the main container for this view."""
        return self._container

    def _build_view(self) -> ft.Container:
        self._name_field = ft.TextField(
            label="New Deck Name",
            expand=True,
            border_radius=10,
            on_submit=lambda e: self._on_add_click(),
        )

        add_button = ft.ElevatedButton(
            content=ft.Row(
                controls=[ft.Icon(ft.Icons.ADD_ROUNDED, size=18), ft.Text("Add")],
                spacing=6,
            ),
            on_click=lambda e: self._on_add_click(),
        )

        reload_button = ft.IconButton(
            icon=ft.Icons.REFRESH_ROUNDED,
            tooltip="Reload decks from disk",
            on_click=lambda e: self._on_reload_click(),
        )

        self._unsaved_badge = ft.Container(
            content=ft.Text("Not saved", size=12, color=ft.Colors.WHITE),
            bgcolor=ft.Colors.ORANGE_700,
            padding=ft.Padding.symmetric(horizontal=10, vertical=4),
            border_radius=12,
            visible=self.store.has_unsaved_changes,
        )

        self._deck_list = ft.ListView(controls=self._build_deck_rows(), spacing=6, expand=True)

        return ft.Container(
            content=ft.Column(
                controls=[
                    header("My Decks", "Create a deck, then add or generate cards", ft.Icons.STYLE_ROUNDED),
                    ft.Row(controls=[self._name_field, add_button, reload_button, self._unsaved_badge]),
                    ft.Divider(height=1, color=ft.Colors.WHITE10),
                    self._deck_list,
                ],
                spacing=12,
                expand=True,
            ),
            expand=True,
        )

    def _build_deck_rows(self) -> list:
        decks = self.store.decks
        if not decks:
            return [ft.Container(
                content=ft.Text("No decks yet", size=14, color=ft.Colors.WHITE38),
                padding=20,
                alignment=ft.Alignment(0, 0),
            )]

        rows = []
        for deck in decks:
            rows.append(ft.ListTile(
                leading=ft.Icon(ft.Icons.FOLDER_ROUNDED, color=ft.Colors.INDIGO_200),
                title=ft.Text(deck.name, weight=ft.FontWeight.W_500),
                subtitle=ft.Text(f"{len(deck.cards)} cards", size=12, color=ft.Colors.WHITE54),
                trailing=ft.Icon(ft.Icons.CHEVRON_RIGHT_ROUNDED),
                on_click=lambda e, deck_id=deck.id: self._on_open_deck(deck_id),
            ))
        return rows

    def dispose(self) -> None:
        """Stop listening to the store."""
        self.store.remove_listener(self.refresh)

    def refresh(self) -> None:
        """Rebuild the list from the store."""
        if self._deck_list is None:
            return
        self._deck_list.controls = self._build_deck_rows()
        if self._unsaved_badge:
            self._unsaved_badge.visible = self.store.has_unsaved_changes
        self.page.update()

    def _on_add_click(self) -> None:
        name = TextParser.clean_input(self._name_field.value or "")
        if not name:
            return
        try:
            self.store.create_deck(name)
        except PersistenceError as e:
            # The deck is still listed; the badge shows it is not on disk
            show_snackbar(self.page, f"Deck created but not saved: {e}", error=True)
        self._name_field.value = ""
        self.refresh()

    def _on_reload_click(self) -> None:
        try:
            decks = self.store.load_all()
        except PersistenceError as e:
            show_snackbar(self.page, str(e), error=True)
            return
        show_snackbar(self.page, f"Loaded {len(decks)} decks", icon=ft.Icons.REFRESH_ROUNDED)
