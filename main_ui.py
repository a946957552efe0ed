"""
AutoAnki: Flashcards with a Study Assistant
-------------------------------------------

Flet interface: decks, card generation, study sessions with an assistant
chat, and settings.
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path for absolute imports
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
import os
from typing import Callable, Optional

import flet as ft

from autoanki import __version__
from autoanki.config import Config, SettingsManager
from autoanki.services import (
    AIConfig,
    CardGenerator,
    CompletionClient,
    DeckExporter,
    DeckStore,
    IntegrationOrchestrator,
    NotFoundError,
    PersistenceError,
)
from autoanki.ui import (
    DeckDetailView,
    DeckListView,
    GenerationView,
    StudyView,
    create_settings_view,
    show_snackbar,
)
from autoanki.utils.logger import setup_logger

logger = logging.getLogger("autoanki.app")


# =============================================================================
# NAVIGATION RAIL (SIDEBAR)
# =============================================================================

def create_navigation_rail(
    on_change: Callable[[int], None],
    selected_index: int = 0
) -> ft.NavigationRail:
    """
    Create the main navigation sidebar.

    Args:
        on_change: Callback when navigation selection changes
        selected_index: Currently selected index

    Returns:
        Configured NavigationRail control
    """
    return ft.NavigationRail(
        selected_index=selected_index,
        label_type=ft.NavigationRailLabelType.ALL,
        min_width=100,
        min_extended_width=200,
        extended=True,
        group_alignment=-0.9,
        destinations=[
            ft.NavigationRailDestination(
                icon=ft.Icons.STYLE_OUTLINED,
                selected_icon=ft.Icons.STYLE_ROUNDED,
                label="Decks",
                padding=ft.Padding.symmetric(vertical=8),
            ),
            ft.NavigationRailDestination(
                icon=ft.Icons.SETTINGS_OUTLINED,
                selected_icon=ft.Icons.SETTINGS_ROUNDED,
                label="Settings",
                padding=ft.Padding.symmetric(vertical=8),
            ),
        ],
        on_change=lambda e: on_change(e.control.selected_index),
        bgcolor="transparent",
    )


# =============================================================================
# MAIN APPLICATION
# =============================================================================

class AutoAnkiApp:
    """Main application controller."""

    DECKS_INDEX = 0
    SETTINGS_INDEX = 1

    def __init__(self, page: ft.Page) -> None:
        """
        Initialize the application.

        Args:
            page: Flet page instance
        """
        self.page = page
        self.settings = SettingsManager()
        self.store = DeckStore(os.path.join(self.settings.get("DATA_DIR", Config.DATA_DIR), "decks.json"))
        self.exporter = DeckExporter(self.settings.get("OUTPUT_DIR", Config.OUTPUT_DIR))
        self.client: Optional[CompletionClient] = None
        self.orchestrator: Optional[IntegrationOrchestrator] = None

        # The view currently shown under "Decks"; disposed when replaced
        self._deck_screen = None
        self._startup_error: Optional[str] = None

        self._setup_page()
        self._build_services()
        self._load_decks()
        self._build_ui()

    def _setup_page(self) -> None:
        """Configure page settings and theme."""
        self.page.title = "AutoAnki"
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.bgcolor = "#121212"
        self.page.theme = ft.Theme(
            color_scheme_seed="#7C4DFF",
            font_family="Inter, Roboto, Segoe UI, sans-serif",
        )
        self.page.padding = 0
        self.page.spacing = 0
        self.page.window.min_width = 1000
        self.page.window.min_height = 650
        self.page.window.width = 1280
        self.page.window.height = 850
        self.page.on_disconnect = lambda e: self.page.run_task(self._shutdown)

    def _build_services(self) -> None:
        """(Re)create the completion client from current settings."""
        old_client = self.client
        self.client = CompletionClient(AIConfig.from_settings(self.settings))
        self.orchestrator = IntegrationOrchestrator(self.store, self.client)
        if old_client is not None:
            self.page.run_task(old_client.close)
        if not self.client.is_configured:
            logger.warning("No API key configured; the assistant is unavailable until one is set")

    def _load_decks(self) -> None:
        try:
            self.store.load_all()
        except PersistenceError as e:
            logger.error("Starting with an empty deck list: %s", e)
            self._startup_error = str(e)
        else:
            self._startup_error = None

    async def _shutdown(self) -> None:
        if self.client is not None:
            await self.client.close()

    def _build_ui(self) -> None:
        """Build the main UI layout."""
        self.content_area = ft.Container(
            expand=True,
            padding=24,
            border_radius=ft.BorderRadius.only(top_left=16, bottom_left=16),
            bgcolor="#1A1A1B",
        )

        self.nav_rail = create_navigation_rail(
            on_change=self._on_nav_change,
            selected_index=self.DECKS_INDEX,
        )

        sidebar = ft.Container(
            content=ft.Column(
                controls=[
                    ft.Container(
                        content=ft.Row(
                            controls=[
                                ft.Icon(ft.Icons.AUTO_AWESOME, color=ft.Colors.INDIGO_200, size=28),
                                ft.Text("AutoAnki", size=20, weight=ft.FontWeight.BOLD, color=ft.Colors.WHITE),
                            ],
                            alignment=ft.MainAxisAlignment.CENTER,
                            spacing=10,
                        ),
                        padding=ft.Padding.only(top=20, bottom=10),
                    ),
                    ft.Divider(height=1, color=ft.Colors.WHITE10),
                    ft.Container(content=self.nav_rail, expand=True),
                    ft.Container(
                        content=ft.Text(
                            f"v{__version__}",
                            size=11,
                            color=ft.Colors.WHITE24,
                            text_align=ft.TextAlign.CENTER,
                        ),
                        padding=ft.Padding.only(bottom=20),
                        alignment=ft.Alignment(0, 0),
                    ),
                ],
                spacing=0,
            ),
            width=220,
            bgcolor="#161617",
        )

        self.page.add(ft.Row(
            controls=[
                sidebar,
                ft.VerticalDivider(width=1, color=ft.Colors.WHITE10),
                self.content_area,
            ],
            spacing=0,
            expand=True,
        ))

        self.show_deck_list()
        if self._startup_error:
            show_snackbar(self.page, f"Could not load decks: {self._startup_error}", error=True)

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    def _on_nav_change(self, index: int) -> None:
        if index == self.SETTINGS_INDEX:
            self._set_deck_screen(None)
            self.content_area.content = create_settings_view(self.page, on_saved=self._build_services)
            self.page.update()
        else:
            self.show_deck_list()

    def _set_deck_screen(self, view) -> None:
        if self._deck_screen is not None and hasattr(self._deck_screen, "dispose"):
            self._deck_screen.dispose()
        self._deck_screen = view
        if view is not None:
            self.content_area.content = view.container
            self.page.update()

    def show_deck_list(self) -> None:
        self.nav_rail.selected_index = self.DECKS_INDEX
        self._set_deck_screen(DeckListView(self.page, self.store, on_open_deck=self.show_deck))

    def show_deck(self, deck_id: str) -> None:
        self._set_deck_screen(DeckDetailView(
            self.page,
            self.store,
            deck_id,
            on_back=self.show_deck_list,
            on_study=self.show_study,
            on_generate=self.show_generation,
            exporter=self.exporter,
        ))

    def show_study(self, deck_id: str) -> None:
        try:
            view = StudyView(
                self.page,
                self.store,
                deck_id,
                client=self.client,
                orchestrator=self.orchestrator,
                on_back=lambda: self.show_deck(deck_id),
            )
        except NotFoundError as e:
            show_snackbar(self.page, str(e), error=True)
            return
        self._set_deck_screen(view)
        if not self.client.is_configured:
            show_snackbar(self.page, "Set an API key in Settings to use the assistant", error=True)

    def show_generation(self, deck_id: str) -> None:
        self._set_deck_screen(GenerationView(
            self.page,
            self.store,
            deck_id,
            generator=CardGenerator(self.client),
            on_back=lambda: self.show_deck(deck_id),
        ))


def main(page: ft.Page) -> None:
    """
    Main entry point for Flet application.

    Args:
        page: Flet page instance
    """
    setup_logger(log_file=Config.LOG_FILE)

    try:
        AutoAnkiApp(page)
    except Exception:
        logger.exception("UI failed to start")
        import traceback
        page.add(
            ft.Container(
                content=ft.Column(
                    controls=[
                        ft.Text("UI failed to start", size=20, weight=ft.FontWeight.BOLD, color=ft.Colors.RED_400),
                        ft.Container(
                            content=ft.Text(traceback.format_exc(), size=11, selectable=True, color=ft.Colors.WHITE70),
                            padding=10,
                            bgcolor=ft.Colors.with_opacity(0.08, ft.Colors.WHITE),
                            border_radius=8,
                        ),
                    ],
                    spacing=10,
                ),
                padding=20,
            )
        )
        page.update()


if __name__ == "__main__":
    ft.run(main)
