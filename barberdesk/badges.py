from __future__ import annotations

import html

STATUS_STYLES = {
    "present": {
        "label": "Presente",
        "background": "rgba(34, 197, 94, 0.2)",
        "text": "#4ade80",
        "border": "rgba(34, 197, 94, 0.3)",
        "dot": "#22c55e",
        "icon": "✅",
    },
    "absent": {
        "label": "Ausente",
        "background": "rgba(239, 68, 68, 0.2)",
        "text": "#f87171",
        "border": "rgba(239, 68, 68, 0.3)",
        "dot": "#ef4444",
        "icon": "❌",
    },
    "pending": {
        "label": "Pendente",
        "background": "rgba(234, 179, 8, 0.2)",
        "text": "#facc15",
        "border": "rgba(234, 179, 8, 0.3)",
        "dot": "#eab308",
        "icon": "🕒",
    },
    "time_off": {
        "label": "Folga",
        "background": "rgba(107, 114, 128, 0.2)",
        "text": "#9ca3af",
        "border": "rgba(107, 114, 128, 0.3)",
        "dot": "#6b7280",
        "icon": "🏖️",
    },
}

# font-size, padding
SIZES = {
    "sm": ("0.75rem", "0.125rem 0.5rem"),
    "md": ("0.875rem", "0.25rem 0.625rem"),
    "lg": ("1rem", "0.375rem 0.75rem"),
}


def _key(status) -> str:
    # accepts AttendanceStatus members as well as plain strings
    return getattr(status, "value", status)


def status_label(status: str) -> str:
    return STATUS_STYLES[_key(status)]["label"]


def attendance_badge(status: str, show_icon: bool = False, size: str = "md") -> str:
    if size not in SIZES:
        raise ValueError(f"Unknown badge size: {size!r}")
    style = STATUS_STYLES[_key(status)]
    font_size, padding = SIZES[size]

    label = html.escape(style["label"])
    if show_icon:
        label = f"{style['icon']} {label}"

    return (
        f'<span class="attendance-badge attendance-{_key(status)}" style="'
        f"display:inline-flex;align-items:center;gap:0.25rem;"
        f"border-radius:9999px;border:1px solid {style['border']};"
        f"background:{style['background']};color:{style['text']};"
        f'font-size:{font_size};padding:{padding};">{label}</span>'
    )


def attendance_indicator(status: str) -> str:
    return (
        f'<span class="attendance-indicator" style="display:inline-block;'
        f"width:0.75rem;height:0.75rem;border-radius:9999px;"
        f'background:{STATUS_STYLES[_key(status)]["dot"]};"></span>'
    )
