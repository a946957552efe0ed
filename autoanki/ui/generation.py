"""
Generation View - cards from notes
-----------------------------------

Paste notes or load a text file, preview the generated cards, then add
the accepted batch to the deck in one step.
"""

from typing import Callable, Dict, List, Optional

import flet as ft

from ..models import Card
from ..services import AutoAnkiError, CardGenerator, DeckStore, NotFoundError, PersistenceError
from .feedback import header, show_snackbar


class GenerationView:
    """Generates candidate cards and hands the accepted ones to the store."""

    def __init__(
        self,
        page: ft.Page,
        store: DeckStore,
        deck_id: str,
        generator: CardGenerator,
        on_back: Callable[[], None],
    ) -> None:
        """
        Initialize the generation view.

        Args:
            page: Flet page instance for updates
            store: Deck store
            deck_id: Target deck for accepted cards
            generator: Card generator
            on_back: Return to the deck
        """
        self.page = page
        self.store = store
        self.deck_id = deck_id
        self.generator = generator
        self._on_back = on_back

        self._candidates: List[Card] = []
        self._selected: Dict[str, bool] = {}
        self.is_generating: bool = False

        # UI References
        self._path_field: Optional[ft.TextField] = None
        self._text_field: Optional[ft.TextField] = None
        self._generate_button: Optional[ft.ElevatedButton] = None
        self._add_button: Optional[ft.ElevatedButton] = None
        self._loading: Optional[ft.ProgressRing] = None
        self._preview: Optional[ft.ListView] = None

        self._container = self._build_view()

    @property
    def container(self) -> ft.Container:
        """Get the main container for this view."""
        return self._container

    def _build_view(self) -> ft.Container:
        self._path_field = ft.TextField(
            label="Notes file (.txt, .md)",
            expand=True,
            border_radius=10,
            prefix_icon=ft.Icons.DESCRIPTION_OUTLINED,
            on_submit=lambda e: self.page.run_task(self._load_file_async),
        )
        self._text_field = ft.TextField(
            label="Notes",
            hint_text="Paste the text to turn into flashcards",
            multiline=True,
            min_lines=8,
            max_lines=14,
            border_radius=10,
        )
        self._loading = ft.ProgressRing(width=18, height=18, stroke_width=2, visible=False)
        self._generate_button = ft.ElevatedButton(
            content=ft.Row(
                controls=[ft.Icon(ft.Icons.AUTO_AWESOME, size=18), ft.Text("Generate")],
                spacing=6,
            ),
            on_click=lambda e: self.page.run_task(self._generate_async),
        )
        self._add_button = ft.ElevatedButton(
            content=ft.Row(
                controls=[ft.Icon(ft.Icons.PLAYLIST_ADD_ROUNDED, size=18), ft.Text("Add All to Deck")],
                spacing=6,
            ),
            disabled=True,
            on_click=self._on_add_all_click,
        )
        self._preview = ft.ListView(spacing=4, expand=True)

        return ft.Container(
            content=ft.Column(
                controls=[
                    ft.Row(
                        controls=[
                            ft.IconButton(
                                icon=ft.Icons.ARROW_BACK_ROUNDED,
                                tooltip="Back to deck",
                                on_click=lambda e: self._on_back(),
                            ),
                            header("Generate Cards", "Extract flashcards from your notes", ft.Icons.AUTO_AWESOME),
                        ],
                    ),
                    ft.Row(
                        controls=[
                            self._path_field,
                            ft.OutlinedButton(
                                "Load",
                                on_click=lambda e: self.page.run_task(self._load_file_async),
                            ),
                        ],
                    ),
                    self._text_field,
                    ft.Row(
                        controls=[
                            self._generate_button,
                            self._loading,
                            ft.Container(expand=True),
                            self._add_button,
                        ],
                        vertical_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    ft.Divider(height=1, color=ft.Colors.WHITE10),
                    self._preview,
                ],
                spacing=12,
                expand=True,
            ),
            expand=True,
        )

    def _build_preview_rows(self) -> list:
        rows = []
        for card in self._candidates:
            rows.append(ft.Container(
                content=ft.Row(
                    controls=[
                        ft.Checkbox(
                            value=self._selected.get(card.id, True),
                            on_change=lambda e, card_id=card.id: self._on_toggle(card_id, e.control.value),
                        ),
                        ft.Column(
                            controls=[
                                ft.Text(card.front, weight=ft.FontWeight.W_500, selectable=True),
                                ft.Text(card.back, size=12, color=ft.Colors.WHITE70, selectable=True),
                            ],
                            spacing=4,
                            expand=True,
                        ),
                    ],
                    vertical_alignment=ft.CrossAxisAlignment.START,
                ),
                padding=12,
                border_radius=10,
                bgcolor="#1A1A1A",
            ))
        return rows

    def _set_generating(self, generating: bool) -> None:
        self.is_generating = generating
        self._loading.visible = generating
        self._generate_button.disabled = generating
        self.page.update()

    def _on_toggle(self, card_id: str, value: bool) -> None:
        self._selected[card_id] = bool(value)
        self._add_button.disabled = not any(self._selected.values())
        self.page.update()

    async def _load_file_async(self) -> None:
        path = (self._path_field.value or "").strip()
        if not path:
            return
        try:
            text = await self.generator.load_source_text(path)
        except (OSError, ValueError) as e:
            show_snackbar(self.page, f"Could not read file: {e}", error=True)
            return
        self._text_field.value = text
        self.page.update()

    async def _generate_async(self) -> None:
        if self.is_generating:
            return
        self._set_generating(True)
        try:
            cards = await self.generator.generate_cards(self._text_field.value or "")
        except ValueError as e:
            show_snackbar(self.page, str(e), error=True)
            return
        except AutoAnkiError as e:
            show_snackbar(self.page, f"Generation failed: {e}", error=True)
            return
        finally:
            self._set_generating(False)

        self._candidates = cards
        self._selected = {card.id: True for card in cards}
        self._preview.controls = self._build_preview_rows()
        self._add_button.disabled = not cards
        if not cards:
            show_snackbar(self.page, "No cards found in the text", error=True)
        self.page.update()

    def _on_add_all_click(self, e: ft.ControlEvent) -> None:
        accepted = [card for card in self._candidates if self._selected.get(card.id, True)]
        if not accepted:
            return
        try:
            added = self.store.append_cards(self.deck_id, accepted)
        except PersistenceError as ex:
            show_snackbar(self.page, f"Cards added but not saved: {ex}", error=True)
            self._on_back()
            return
        except NotFoundError as ex:
            show_snackbar(self.page, str(ex), error=True)
            return

        show_snackbar(self.page, f"Added {len(added)} cards")
        self._on_back()
