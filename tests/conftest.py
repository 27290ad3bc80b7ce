from __future__ import annotations

from framexml.models import TextFont

REGULAR = TextFont(name="Minion Regular", family="Minion", style="Regular")
BOLD = TextFont(name="Minion Bold", family="Minion", style="Bold")
ITALIC = TextFont(name="Minion Italic", family="Minion", style="Italic")
BOLD_ITALIC = TextFont(name="Minion Bold Italic", family="Minion", style="Bold Italic")
MINION = (REGULAR, BOLD, ITALIC, BOLD_ITALIC)
