"""
Deck Detail View - cards of one deck
-------------------------------------

Manual card entry, export to .apkg, and the entry points for study and
card generation.
"""

import asyncio
from typing import Callable, Optional

import flet as ft

from ..models import Deck
from ..services import DeckExporter, DeckStore, NotFoundError, PersistenceError
from ..utils.helpers import truncate_text
from ..utils.parsing import TextParser
from .feedback import show_snackbar


class DeckDetailView:
    """Shows one deck and lets the user add cards to it."""

    def __init__(
        self,
        page: ft.Page,
        store: DeckStore,
        deck_id: str,
        on_back: Callable[[], None],
        on_study: Callable[[str], None],
        on_generate: Callable[[str], None],
        exporter: Optional[DeckExporter] = None,
    ) -> None:
        """
        Initialize the deck view.

        Args:
            page: Flet page instance for updates
            store: Deck store
            deck_id: Deck to show
            on_back: Return to the deck list
            on_study: Start a study session for a deck id
            on_generate: Open card generation for a deck id
            exporter: Deck exporter (a default one is created if omitted)
        """
        self.page = page
        self.store = store
        self.deck_id = deck_id
        self._on_back = on_back
        self._on_study = on_study
        self._on_generate = on_generate
        self.exporter = exporter or DeckExporter()

        # UI References
        self._title: Optional[ft.Text] = None
        self._front_field: Optional[ft.TextField] = None
        self._back_field: Optional[ft.TextField] = None
        self._card_list: Optional[ft.ListView] = None
        self._export_button: Optional[ft.IconButton] = None
        self._unsaved_badge: Optional[ft.Container] = None

        self.is_exporting: bool = False

        self._container = self._build_view()
        self.store.on_change(self.refresh)

    @property
    def container(self) -> ft.Container:
        """Get the main container for this view."""
        return self._container

    def _current_deck(self) -> Optional[Deck]:
        try:
            return self.store.get_deck(self.deck_id)
        except NotFoundError:
            return None

    # =========================================================================
    # LAYOUT
    # =========================================================================

    def _build_view(self) -> ft.Container:
        deck = self._current_deck()

        self._title = ft.Text(
            deck.name if deck else "Deck",
            size=28,
            weight=ft.FontWeight.BOLD,
            color=ft.Colors.WHITE,
        )

        self._unsaved_badge = ft.Container(
            content=ft.Text("Not saved", size=12, color=ft.Colors.WHITE),
            bgcolor=ft.Colors.ORANGE_700,
            padding=ft.Padding.symmetric(horizontal=10, vertical=4),
            border_radius=12,
            visible=self.store.has_unsaved_changes,
        )

        self._export_button = ft.IconButton(
            icon=ft.Icons.DOWNLOAD_ROUNDED,
            tooltip="Export .apkg",
            on_click=lambda e: self.page.run_task(self._export_async),
        )

        toolbar = ft.Row(
            controls=[
                ft.IconButton(
                    icon=ft.Icons.ARROW_BACK_ROUNDED,
                    tooltip="All decks",
                    on_click=lambda e: self._on_back(),
                ),
                self._title,
                self._unsaved_badge,
                ft.Container(expand=True),
                ft.ElevatedButton(
                    content=ft.Row(
                        controls=[ft.Icon(ft.Icons.SCHOOL_ROUNDED, size=18), ft.Text("Study")],
                        spacing=6,
                    ),
                    on_click=lambda e: self._on_study(self.deck_id),
                ),
                ft.OutlinedButton(
                    content=ft.Row(
                        controls=[ft.Icon(ft.Icons.AUTO_AWESOME, size=18), ft.Text("Generate Cards")],
                        spacing=6,
                    ),
                    on_click=lambda e: self._on_generate(self.deck_id),
                ),
                self._export_button,
            ],
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )

        self._front_field = ft.TextField(
            label="Front",
            multiline=True,
            min_lines=1,
            max_lines=4,
            expand=True,
            border_radius=10,
        )
        self._back_field = ft.TextField(
            label="Back",
            multiline=True,
            min_lines=1,
            max_lines=4,
            expand=True,
            border_radius=10,
        )

        entry = ft.Container(
            content=ft.Column(
                controls=[
                    ft.Text("New Card", size=16, weight=ft.FontWeight.BOLD, color=ft.Colors.WHITE),
                    ft.Row(controls=[self._front_field, self._back_field]),
                    ft.Row(
                        controls=[
                            ft.Text("Use $...$ for math", size=11, color=ft.Colors.WHITE38),
                            ft.Container(expand=True),
                            ft.ElevatedButton(
                                content=ft.Row(
                                    controls=[ft.Icon(ft.Icons.ADD_ROUNDED, size=18), ft.Text("Add Card")],
                                    spacing=6,
                                ),
                                on_click=self._on_add_click,
                            ),
                        ],
                    ),
                ],
                spacing=10,
            ),
            padding=20,
            border_radius=12,
            bgcolor="#1A1A1A",
        )

        self._card_list = ft.ListView(controls=self._build_card_rows(deck), spacing=4, expand=True)

        return ft.Container(
            content=ft.Column(
                controls=[
                    toolbar,
                    entry,
                    ft.Divider(height=1, color=ft.Colors.WHITE10),
                    self._card_list,
                ],
                spacing=12,
                expand=True,
            ),
            expand=True,
        )

    def _build_card_rows(self, deck: Optional[Deck]) -> list:
        if deck is None:
            return [ft.Text("This deck no longer exists", color=ft.Colors.RED_300)]
        if not deck.cards:
            return [ft.Container(
                content=ft.Text("No cards yet", size=14, color=ft.Colors.WHITE38),
                padding=20,
                alignment=ft.Alignment(0, 0),
            )]

        return [
            ft.ListTile(
                leading=ft.Text(str(i), size=12, color=ft.Colors.WHITE38),
                title=ft.Text(truncate_text(card.front, 80)),
                subtitle=ft.Text(truncate_text(card.back, 80), size=12, color=ft.Colors.WHITE54),
                dense=True,
            )
            for i, card in enumerate(deck.cards, start=1)
        ]

    # =========================================================================
    # EVENTS
    # =========================================================================

    def dispose(self) -> None:
        """Stop listening to the store."""
        self.store.remove_listener(self.refresh)

    def refresh(self) -> None:
        deck = self._current_deck()
        if self._title and deck:
            self._title.value = deck.name
        if self._card_list:
            self._card_list.controls = self._build_card_rows(deck)
        if self._unsaved_badge:
            self._unsaved_badge.visible = self.store.has_unsaved_changes
        self.page.update()

    def _on_add_click(self, e: ft.ControlEvent) -> None:
        front = TextParser.clean_input(self._front_field.value or "")
        back = TextParser.clean_input(self._back_field.value or "")
        if not front or not back:
            show_snackbar(self.page, "Front and back are both required", error=True)
            return

        try:
            self.store.append_card(self.deck_id, front, back)
        except PersistenceError as ex:
            show_snackbar(self.page, f"Card added but not saved: {ex}", error=True)
        except NotFoundError as ex:
            show_snackbar(self.page, str(ex), error=True)
            return

        self._front_field.value = ""
        self._back_field.value = ""
        self.page.update()

    async def _export_async(self) -> None:
        """Write the deck to an .apkg file off the UI loop."""
        if self.is_exporting:
            return
        deck = self._current_deck()
        if deck is None:
            return
        if not deck.cards:
            show_snackbar(self.page, "Nothing to export, the deck is empty", error=True)
            return

        self.is_exporting = True
        self._export_button.disabled = True
        self.page.update()
        try:
            output_path = await asyncio.to_thread(self.exporter.export, deck)
        except OSError as ex:
            show_snackbar(self.page, f"Export failed: {ex}", error=True)
        else:
            show_snackbar(self.page, f"Exported to {output_path}", icon=ft.Icons.DOWNLOAD_DONE_ROUNDED)
        finally:
            self.is_exporting = False
            self._export_button.disabled = False
            self.page.update()
