"""QSS stylesheet and phase colors for Respira."""

from __future__ import annotations

# ── phase colors, keyed by style class ──────────────────────────────────
#    (fill, glow) for the ball on the canvas.

PHASE_COLORS: dict[str, tuple[str, str]] = {
    "expand":   ("#7FB8E6", "#B9DBF5"),   # inspire: open blue
    "hold":     ("#E9CF8F", "#F6E7C1"),   # hold: warm sand
    "contract": ("#8FD1A6", "#C6EBD2"),   # expire: soft green
}

IDLE_COLOR = "#5E6A7A"

PALETTE: dict[str, str] = {
    "base":       "#14202B",
    "raised":     "#1C2C3A",
    "hover":      "#253849",
    "line":       "#2E4456",
    "ink":        "#E4EEF5",
    "ink_soft":   "#8397A8",
    "accent":     "#7FB8E6",
    "stop":       "#E88F8F",
}


def build_stylesheet(palette: dict[str, str] = PALETTE) -> str:
    c = palette
    field = (
        f"background-color: {c['raised']}; border: 1px solid {c['line']}; "
        "border-radius: 6px; padding: 4px 8px;"
    )
    return f"""
    QMainWindow, QDialog, QWidget {{
        background-color: {c['base']};
        color: {c['ink']};
        font-size: 14px;
    }}
    QStatusBar, QLabel#cycleLabel, QLabel#sessionLabel {{ color: {c['ink_soft']}; }}
    QLabel#doneLabel {{ color: {c['accent']}; font-weight: 600; }}
    QLabel#phaseLabel {{ font-size: 24px; font-weight: 600; letter-spacing: 1px; }}

    QPushButton {{
        background-color: {c['raised']};
        border: 1px solid {c['line']};
        border-radius: 14px;
        padding: 7px 16px;
    }}
    QPushButton:hover {{ background-color: {c['hover']}; }}
    QPushButton:disabled {{ color: {c['ink_soft']}; border-color: {c['raised']}; }}
    QPushButton#primaryButton {{ background-color: {c['accent']}; color: {c['base']}; border: none; }}
    QPushButton#dangerButton {{ color: {c['stop']}; border-color: {c['stop']}; }}
    QPushButton#soundButton[muted="true"] {{ color: {c['ink_soft']}; font-style: italic; }}

    QComboBox, QSpinBox {{ {field} }}
    QSpinBox:disabled {{ color: {c['ink_soft']}; }}
    """
