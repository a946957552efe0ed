"""
Study View - flip through a deck with an assistant at hand
-----------------------------------------------------------

The card panel shows one side of the current card. The assistant panel
holds a conversation about that card; any assistant answer can be
integrated back into the card through a dialog.
"""

import asyncio
from typing import Callable, Optional

import flet as ft

from ..config import Config
from ..models import Message, Role
from ..services import (
    AutoAnkiError,
    ChatSession,
    CompletionClient,
    DeckStore,
    Grade,
    IntegrationOrchestrator,
    IntegrationRequest,
    IntegrationState,
    NotFoundError,
    StudySession,
)
from .feedback import close_dialog, open_dialog, show_snackbar


# =============================================================================
# CHAT BUBBLES
# =============================================================================

def create_message_bubble(
    message: Message,
    on_integrate: Optional[Callable[[Message], None]] = None,
) -> ft.Row:
    """
    Build one chat bubble.

    Assistant bubbles carry an integrate button when on_integrate is given.
    """
    is_user = message.role == Role.USER
    controls = [ft.Text(message.content, selectable=True, color=ft.Colors.WHITE)]
    if not is_user and on_integrate is not None:
        controls.append(ft.Row(
            controls=[
                ft.IconButton(
                    icon=ft.Icons.MERGE_TYPE_ROUNDED,
                    icon_size=18,
                    tooltip="Integrate into card",
                    on_click=lambda e: on_integrate(message),
                ),
            ],
            alignment=ft.MainAxisAlignment.END,
        ))

    bubble = ft.Container(
        content=ft.Column(controls=controls, spacing=4, tight=True),
        padding=12,
        border_radius=12,
        bgcolor=ft.Colors.INDIGO_700 if is_user else "#262628",
        width=520,
    )
    return ft.Row(
        controls=[bubble],
        alignment=ft.MainAxisAlignment.END if is_user else ft.MainAxisAlignment.START,
    )


# =============================================================================
# STUDY VIEW
# =============================================================================

class StudyView:
    """Study one deck, card by card."""

    def __init__(
        self,
        page: ft.Page,
        store: DeckStore,
        deck_id: str,
        client: CompletionClient,
        orchestrator: IntegrationOrchestrator,
        on_back: Callable[[], None],
    ) -> None:
        """
        Initialize the study view.

        Args:
            page: Flet page instance for updates
            store: Deck store
            deck_id: Deck to study
            client: Completion client for the assistant
            orchestrator: Integration orchestrator
            on_back: Leave the session
        """
        self.page = page
        self.store = store
        self.deck_id = deck_id
        self.client = client
        self.orchestrator = orchestrator
        self._on_back = on_back

        self.session = StudySession(store.get_deck(deck_id))
        self.chat: Optional[ChatSession] = None
        self.is_asking: bool = False
        self._reset_chat()

        # UI References
        self._progress_text: Optional[ft.Text] = None
        self._side_label: Optional[ft.Text] = None
        self._card_text: Optional[ft.Text] = None
        self._card_panel: Optional[ft.Container] = None
        self._chat_panel: Optional[ft.Container] = None
        self._chat_list: Optional[ft.ListView] = None
        self._question_field: Optional[ft.TextField] = None
        self._send_button: Optional[ft.IconButton] = None
        self._chat_loading: Optional[ft.ProgressRing] = None
        self._card_tab: Optional[ft.TextButton] = None
        self._chat_tab: Optional[ft.TextButton] = None

        self._container = self._build_view()
        self.store.on_change(self.refresh)

    @property
    def container(self) -> ft.Container:
        """Get the main container for this view."""
        return self._container

    def _reset_chat(self) -> None:
        card = self.session.current_card
        self.chat = ChatSession(card, self.client) if card else None

    # =========================================================================
    # LAYOUT
    # =========================================================================

    def _build_view(self) -> ft.Container:
        self._card_tab = ft.TextButton("Card", on_click=lambda e: self._show_panel(chat=False))
        self._chat_tab = ft.TextButton("Assistant", on_click=lambda e: self._show_panel(chat=True))

        self._card_panel = self._build_card_panel()
        self._chat_panel = self._build_chat_panel()
        self._chat_panel.visible = False

        return ft.Container(
            content=ft.Column(
                controls=[
                    ft.Row(
                        controls=[
                            ft.IconButton(
                                icon=ft.Icons.CLOSE_ROUNDED,
                                tooltip="End session",
                                on_click=lambda e: self._on_back(),
                            ),
                            self._card_tab,
                            self._chat_tab,
                        ],
                    ),
                    self._card_panel,
                    self._chat_panel,
                ],
                spacing=12,
                expand=True,
            ),
            expand=True,
        )

    def _build_card_panel(self) -> ft.Container:
        self._progress_text = ft.Text(self.session.progress_text, size=13, color=ft.Colors.WHITE54)
        self._side_label = ft.Text("", size=12, color=ft.Colors.INDIGO_200)
        self._card_text = ft.Text(
            "",
            size=22,
            selectable=True,
            text_align=ft.TextAlign.CENTER,
            color=ft.Colors.WHITE,
        )

        card_face = ft.Container(
            content=ft.Column(
                controls=[self._side_label, self._card_text],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
                spacing=12,
            ),
            expand=True,
            padding=30,
            border_radius=16,
            bgcolor="#1A1A1A",
            alignment=ft.Alignment(0, 0),
            on_click=lambda e: self._on_flip(),
        )

        grade_buttons = [
            ft.OutlinedButton(
                f"{grade.title} ({self._format_delay(grade.delay_seconds)})",
                on_click=lambda e, g=grade: self._on_grade(g),
            )
            for grade in Grade
        ]

        navigation = ft.Row(
            controls=[
                ft.IconButton(
                    icon=ft.Icons.CHEVRON_LEFT_ROUNDED,
                    tooltip="Previous card",
                    on_click=lambda e: self._on_prev(),
                ),
                ft.ElevatedButton(
                    content=ft.Row(
                        controls=[ft.Icon(ft.Icons.FLIP_ROUNDED, size=18), ft.Text("Flip")],
                        spacing=6,
                    ),
                    on_click=lambda e: self._on_flip(),
                ),
                ft.IconButton(
                    icon=ft.Icons.CHEVRON_RIGHT_ROUNDED,
                    tooltip="Next card",
                    on_click=lambda e: self._on_next(),
                ),
            ],
            alignment=ft.MainAxisAlignment.CENTER,
        )

        self._render_card()
        return ft.Container(
            content=ft.Column(
                controls=[
                    self._progress_text,
                    card_face,
                    navigation,
                    ft.Row(controls=grade_buttons, alignment=ft.MainAxisAlignment.CENTER, wrap=True),
                ],
                spacing=12,
                expand=True,
            ),
            expand=True,
        )

    def _build_chat_panel(self) -> ft.Container:
        self._chat_list = ft.ListView(spacing=8, expand=True, auto_scroll=True)
        self._question_field = ft.TextField(
            hint_text="Ask about this card...",
            expand=True,
            border_radius=10,
            shift_enter=True,
            on_submit=lambda e: self.page.run_task(self._ask_async),
        )
        self._send_button = ft.IconButton(
            icon=ft.Icons.SEND_ROUNDED,
            tooltip="Send",
            on_click=lambda e: self.page.run_task(self._ask_async),
        )
        self._chat_loading = ft.ProgressRing(width=18, height=18, stroke_width=2, visible=False)

        self._render_chat()
        return ft.Container(
            content=ft.Column(
                controls=[
                    self._chat_list,
                    ft.Row(
                        controls=[self._question_field, self._chat_loading, self._send_button],
                        vertical_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                ],
                spacing=10,
                expand=True,
            ),
            expand=True,
        )

    @staticmethod
    def _format_delay(seconds: int) -> str:
        if seconds >= 86400:
            return f"{seconds // 86400}d"
        if seconds >= 3600:
            return f"{seconds // 3600}h"
        return f"{seconds // 60}m"

    # =========================================================================
    # RENDERING
    # =========================================================================

    def _render_card(self) -> None:
        self._progress_text.value = self.session.progress_text
        if self.session.current_card is None:
            self._side_label.value = ""
            self._card_text.value = "This deck has no cards"
        elif self.session.complete:
            self._side_label.value = ""
            self._card_text.value = "Session complete"
        else:
            self._side_label.value = "FRONT" if self.session.showing_front else "BACK"
            self._card_text.value = self.session.current_text

    def _render_chat(self) -> None:
        if self.chat is None:
            self._chat_list.controls = []
            return
        self._chat_list.controls = [
            create_message_bubble(message, on_integrate=self._open_integration_dialog)
            for message in self.chat.visible_messages
        ]

    def _show_panel(self, chat: bool) -> None:
        self._card_panel.visible = not chat
        self._chat_panel.visible = chat
        self.page.update()

    # =========================================================================
    # CARD EVENTS
    # =========================================================================

    def dispose(self) -> None:
        """Stop listening to the store."""
        self.store.remove_listener(self.refresh)

    def refresh(self) -> None:
        """Pick up store changes, e.g. a card edited by integration."""
        try:
            deck = self.store.get_deck(self.deck_id)
        except NotFoundError:
            return
        self.session.refresh(deck)
        card = self.session.current_card
        if self.chat is not None and card is not None and card.id == self.chat.card.id:
            self.chat.update_card(card)
        self._render_card()
        self.page.update()

    def _after_move(self, moved: bool) -> None:
        if moved:
            self._reset_chat()
            self._render_chat()
        self._render_card()
        self.page.update()

    def _on_flip(self) -> None:
        if self.session.current_card is None or self.session.complete:
            return
        self.session.flip()
        self._render_card()
        self.page.update()

    def _on_next(self) -> None:
        self._after_move(self.session.next_card())

    def _on_prev(self) -> None:
        self.session.complete = False
        self._after_move(self.session.prev_card())

    def _on_grade(self, grade: Grade) -> None:
        if self.session.current_card is None or self.session.complete:
            return
        self._after_move(self.session.grade(grade))

    # =========================================================================
    # ASSISTANT
    # =========================================================================

    def _set_asking(self, asking: bool) -> None:
        self.is_asking = asking
        self._chat_loading.visible = asking
        self._send_button.disabled = asking
        self.page.update()

    async def _ask_async(self) -> None:
        if self.is_asking or self.chat is None:
            return
        question = self._question_field.value or ""
        if not question.strip():
            return

        chat = self.chat
        self._question_field.value = ""
        # Show the question while the answer is pending
        self._chat_list.controls.append(create_message_bubble(Message(role=Role.USER, content=question)))
        self._set_asking(True)
        try:
            await chat.ask(question)
        except AutoAnkiError as e:
            show_snackbar(self.page, str(e), error=True)
        finally:
            self._set_asking(False)

        if chat is self.chat:
            self._render_chat()
            self.page.update()

    # =========================================================================
    # INTEGRATION DIALOG
    # =========================================================================

    def _open_integration_dialog(self, message: Message) -> None:
        if self.chat is None:
            return

        chat = self.chat
        # One request per attempt; Cancel dismisses the latest
        attempts = []

        instructions_field = ft.TextField(
            label="Instructions (optional)",
            hint_text="e.g. keep the back under two sentences",
            multiline=True,
            min_lines=2,
            max_lines=4,
            width=420,
        )
        error_text = ft.Text("", size=12, color=ft.Colors.RED_300, visible=False)
        status_text = ft.Text("", size=12, color=ft.Colors.WHITE54)
        progress = ft.ProgressRing(width=18, height=18, stroke_width=2, visible=False)
        integrate_button = ft.ElevatedButton("Integrate")

        def on_state_change(req: IntegrationRequest) -> None:
            if not attempts or req is not attempts[-1]:
                return
            status_text.value = req.state.value.replace("_", " ").capitalize()
            progress.visible = not req.state.is_terminal
            self.page.update()

        def on_cancel(e) -> None:
            if attempts:
                attempts[-1].dismiss()
            close_dialog(self.page, dialog)

        async def run_integration() -> None:
            request = IntegrationRequest(
                card=chat.card,
                conversation=chat.messages,
                assistant_message=message,
                instructions=instructions_field.value or "",
            )
            attempts.append(request)
            error_text.visible = False
            integrate_button.disabled = True
            instructions_field.disabled = True
            self.page.update()

            result = await self.orchestrator.integrate(request, on_state_change=on_state_change)

            if result.state == IntegrationState.DISCARDED:
                return

            if result.succeeded:
                close_dialog(self.page, dialog)
                show_snackbar(
                    self.page,
                    result.message,
                    error=not result.persisted,
                    icon=ft.Icons.CHECK_CIRCLE if result.persisted else ft.Icons.SAVE_AS_ROUNDED,
                )
                return

            # Failed: keep the dialog open so the user can retry
            error_text.value = result.message
            error_text.visible = True
            integrate_button.disabled = False
            instructions_field.disabled = False
            progress.visible = False
            self.page.update()
            await asyncio.sleep(Config.ERROR_TOAST_SECONDS)
            if error_text.value == result.message:
                error_text.visible = False
                self.page.update()

        integrate_button.on_click = lambda e: self.page.run_task(run_integration)

        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Row(
                controls=[
                    ft.Icon(ft.Icons.MERGE_TYPE_ROUNDED, color=ft.Colors.INDIGO_200),
                    ft.Text("Integrate into card", weight=ft.FontWeight.W_700, size=18),
                ],
                spacing=12,
            ),
            content=ft.Column(
                controls=[
                    ft.Text(
                        "The card will be rewritten to include this answer.",
                        size=13,
                        color=ft.Colors.WHITE70,
                    ),
                    instructions_field,
                    error_text,
                    ft.Row(controls=[progress, status_text], spacing=8),
                ],
                spacing=12,
                tight=True,
            ),
            actions=[
                ft.TextButton("Cancel", on_click=on_cancel),
                integrate_button,
            ],
            actions_alignment=ft.MainAxisAlignment.END,
        )
        open_dialog(self.page, dialog)
