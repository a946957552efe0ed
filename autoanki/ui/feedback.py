"""Transient notifications shared by all views."""

from typing import Optional

import flet as ft

from ..config import Config


def show_snackbar(
    page: ft.Page,
    message: str,
    error: bool = False,
    icon: Optional[str] = None,
    duration_ms: Optional[int] = None,
) -> None:
    """
    Show a snackbar notification that dismisses itself.

    Args:
        page: Flet page
        message: Text to show
        error: Red styling and a longer default duration
        icon: Optional icon override
        duration_ms: Display time; defaults to the configured toast durations
    """
    if duration_ms is None:
        seconds = Config.ERROR_TOAST_SECONDS if error else Config.SUCCESS_TOAST_SECONDS
        duration_ms = int(seconds * 1000)

    snackbar = ft.SnackBar(
        content=ft.Row(
            controls=[
                ft.Icon(
                    icon or (ft.Icons.ERROR if error else ft.Icons.CHECK_CIRCLE),
                    color=ft.Colors.WHITE,
                    size=18,
                ),
                ft.Text(message, color=ft.Colors.WHITE),
            ],
            spacing=10,
        ),
        bgcolor=ft.Colors.RED_700 if error else ft.Colors.GREEN_700,
        duration=duration_ms,
    )
    # Clean up old snackbars to prevent memory leak
    for ctrl in list(page.overlay):
        if isinstance(ctrl, ft.SnackBar):
            page.overlay.remove(ctrl)
    page.overlay.append(snackbar)
    snackbar.open = True
    page.update()


def close_dialog(page: ft.Page, dialog: ft.AlertDialog) -> None:
    """Close an overlay dialog and drop it from the page."""
    dialog.open = False
    page.update()
    if dialog in page.overlay:
        page.overlay.remove(dialog)


def open_dialog(page: ft.Page, dialog: ft.AlertDialog) -> None:
    page.overlay.append(dialog)
    dialog.open = True
    page.update()


def header(title: str, subtitle: str, icon: str) -> ft.Container:
    """Page header used at the top of every view."""
    return ft.Container(
        content=ft.Row(
            controls=[
                ft.Icon(icon, size=32, color=ft.Colors.INDIGO_200),
                ft.Column(
                    controls=[
                        ft.Text(title, size=28, weight=ft.FontWeight.BOLD, color=ft.Colors.WHITE),
                        ft.Text(subtitle, size=14, color=ft.Colors.WHITE54),
                    ],
                    spacing=2,
                ),
            ],
            spacing=15,
        ),
        padding=ft.Padding.only(bottom=20),
    )
