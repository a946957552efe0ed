"""
Settings View - Application Configuration UI
----------------------------------------------

Edits the completion endpoint settings through SettingsManager.
"""

from typing import Callable, Optional

import flet as ft

from ..config import Config, SettingsManager
from .feedback import header, show_snackbar


class SettingsView:
    """
    Settings view for the assistant connection.

    Binds to SettingsManager for persistent storage.
    """

    def __init__(self, page: ft.Page, on_saved: Optional[Callable[[], None]] = None) -> None:
        """
        Initialize the Settings view.

        Args:
            page: Flet page instance for updates
            on_saved: Called after settings are saved or reset
        """
        self.page = page
        self.settings = SettingsManager()
        self._on_saved = on_saved

        # UI References
        self._api_key_field: Optional[ft.TextField] = None
        self._base_url_field: Optional[ft.TextField] = None
        self._model_field: Optional[ft.TextField] = None
        self._chat_temp_slider: Optional[ft.Slider] = None
        self._integration_temp_slider: Optional[ft.Slider] = None
        self._timeout_field: Optional[ft.TextField] = None
        self._retries_field: Optional[ft.TextField] = None

        self._container = self._build_view()

    @property
    def container(self) -> ft.Container:
        """Get the main container for this view."""
        return self._container

    def _build_view(self) -> ft.Container:
        """Build the settings layout."""
        save_button = ft.ElevatedButton(
            content=ft.Row(
                controls=[
                    ft.Icon(ft.Icons.SAVE_ROUNDED, size=20),
                    ft.Text("Save Settings", size=15, weight=ft.FontWeight.W_500),
                ],
                spacing=8,
                alignment=ft.MainAxisAlignment.CENTER,
            ),
            on_click=self._on_save_click,
        )
        reset_button = ft.TextButton(
            content=ft.Text("Reset to Defaults", color=ft.Colors.WHITE54),
            on_click=self._on_reset_click,
        )

        return ft.Container(
            content=ft.Column(
                controls=[
                    header("Settings", "Configure the study assistant", ft.Icons.SETTINGS_ROUNDED),
                    ft.Container(
                        content=ft.Column(
                            controls=[
                                self._build_api_section(),
                                ft.Container(height=20),
                                self._build_model_section(),
                                ft.Container(height=30),
                                ft.Row(
                                    controls=[reset_button, ft.Container(expand=True), save_button],
                                    alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                                ),
                            ],
                            scroll=ft.ScrollMode.AUTO,
                            expand=True,
                        ),
                        expand=True,
                    ),
                ],
                expand=True,
            ),
            expand=True,
            padding=10,
        )

    def _build_section_card(self, title: str, icon: str, controls: list) -> ft.Container:
        """Build a styled section card."""
        return ft.Container(
            content=ft.Column(
                controls=[
                    ft.Row(
                        controls=[
                            ft.Icon(icon, size=20, color=ft.Colors.INDIGO_200),
                            ft.Text(title, size=16, weight=ft.FontWeight.BOLD, color=ft.Colors.WHITE),
                        ],
                        spacing=10,
                    ),
                    ft.Divider(height=1, color=ft.Colors.WHITE10),
                    *controls,
                ],
                spacing=10,
            ),
            padding=20,
            border_radius=12,
            bgcolor="#1A1A1A",
        )

    def _build_api_section(self) -> ft.Container:
        self._api_key_field = ft.TextField(
            value=self.settings.get("OPENAI_API_KEY", ""),
            label="API Key",
            hint_text="sk-...",
            password=True,
            can_reveal_password=True,
            prefix_icon=ft.Icons.KEY_ROUNDED,
        )
        self._base_url_field = ft.TextField(
            value=self.settings.get("AI_BASE_URL", Config.AI_BASE_URL),
            label="Base URL",
            hint_text="https://api.openai.com/v1",
            prefix_icon=ft.Icons.LINK_ROUNDED,
        )
        return self._build_section_card(
            "API Configuration",
            ft.Icons.API_ROUNDED,
            [
                ft.Text(
                    "Any OpenAI-compatible chat completions endpoint. "
                    "OPENAI_API_KEY in the environment overrides the saved key.",
                    size=12,
                    color=ft.Colors.WHITE38,
                ),
                self._api_key_field,
                self._base_url_field,
            ],
        )

    def _build_model_section(self) -> ft.Container:
        self._model_field = ft.TextField(
            value=self.settings.get("AI_MODEL", Config.AI_MODEL),
            label="Model",
            width=300,
        )
        self._chat_temp_slider = ft.Slider(
            min=0,
            max=1,
            divisions=10,
            value=float(self.settings.get("CHAT_TEMPERATURE", Config.CHAT_TEMPERATURE)),
            label="Chat temperature {value}",
        )
        self._integration_temp_slider = ft.Slider(
            min=0,
            max=1,
            divisions=10,
            value=float(self.settings.get("INTEGRATION_TEMPERATURE", Config.INTEGRATION_TEMPERATURE)),
            label="Integration temperature {value}",
        )
        self._timeout_field = ft.TextField(
            value=str(self.settings.get("TIMEOUT", Config.TIMEOUT)),
            label="Request Timeout (seconds)",
            width=200,
            input_filter=ft.NumbersOnlyInputFilter(),
        )
        self._retries_field = ft.TextField(
            value=str(self.settings.get("RETRIES", Config.RETRIES)),
            label="Retries",
            width=200,
            input_filter=ft.NumbersOnlyInputFilter(),
        )
        return self._build_section_card(
            "Model",
            ft.Icons.TUNE_ROUNDED,
            [
                self._model_field,
                ft.Text("Chat temperature", size=13, color=ft.Colors.WHITE70),
                self._chat_temp_slider,
                ft.Text("Integration temperature", size=13, color=ft.Colors.WHITE70),
                self._integration_temp_slider,
                ft.Row(controls=[self._timeout_field, self._retries_field], spacing=15, wrap=True),
            ],
        )

    def _on_save_click(self, e: ft.ControlEvent) -> None:
        """Handle save button click."""
        try:
            timeout = int(self._timeout_field.value) if self._timeout_field.value else Config.TIMEOUT
            retries = int(self._retries_field.value) if self._retries_field.value else Config.RETRIES

            self.settings.set("OPENAI_API_KEY", (self._api_key_field.value or "").strip())
            self.settings.set("AI_BASE_URL", (self._base_url_field.value or Config.AI_BASE_URL).strip())
            self.settings.set("AI_MODEL", (self._model_field.value or Config.AI_MODEL).strip())
            self.settings.set("CHAT_TEMPERATURE", round(float(self._chat_temp_slider.value), 2))
            self.settings.set("INTEGRATION_TEMPERATURE", round(float(self._integration_temp_slider.value), 2))
            self.settings.set("TIMEOUT", timeout)
            self.settings.set("RETRIES", retries)
        except (OSError, ValueError) as ex:
            show_snackbar(self.page, f"Error saving settings: {ex}", error=True)
            return

        if self._on_saved:
            self._on_saved()
        show_snackbar(self.page, "Settings saved")

    def _on_reset_click(self, e: ft.ControlEvent) -> None:
        self.settings.reset()
        self._reload_ui()
        if self._on_saved:
            self._on_saved()
        show_snackbar(self.page, "Settings reset to defaults")

    def _reload_ui(self) -> None:
        """Reload UI with current settings values."""
        self._api_key_field.value = self.settings.get("OPENAI_API_KEY", "")
        self._base_url_field.value = self.settings.get("AI_BASE_URL", Config.AI_BASE_URL)
        self._model_field.value = self.settings.get("AI_MODEL", Config.AI_MODEL)
        self._chat_temp_slider.value = float(self.settings.get("CHAT_TEMPERATURE", Config.CHAT_TEMPERATURE))
        self._integration_temp_slider.value = float(
            self.settings.get("INTEGRATION_TEMPERATURE", Config.INTEGRATION_TEMPERATURE)
        )
        self._timeout_field.value = str(self.settings.get("TIMEOUT", Config.TIMEOUT))
        self._retries_field.value = str(self.settings.get("RETRIES", Config.RETRIES))
        self.page.update()


def create_settings_view(page: ft.Page, on_saved: Optional[Callable[[], None]] = None) -> ft.Container:
    """
    Factory function to create the settings view.

    Args:
        page: Flet page instance
        on_saved: Called after settings change

    Returns:
        Container with the settings view
    """
    return SettingsView(page, on_saved=on_saved).container
