"""Prompt styles for supascan's interactive prompts.

Three prompts exist: the collection picker, the confirmation shown before a
full (noisy) discovery run, and secret entry for the account password. They
share one base palette and differ in the accent colour.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

_BASE = {
    "qmark": "ansimagenta",
    "separator": "ansibrightblack",
    "instruction": "italic ansibrightblack",
    "disabled": "ansibrightblack",
    "error": "bold ansired",
}


def _accented(accent: str, **extra: str) -> Style:
    rules = dict(_BASE)
    rules.update(
        {
            "question": f"bold {accent}",
            "answer": f"bold {accent}",
            "pointer": f"bold {accent}",
            "highlighted": accent,
        }
    )
    rules.update({k.replace("_", "-"): v for k, v in extra.items()})
    return Style.from_dict(rules)


# Collection picker: checked rows stand out, unchecked ones fade.
QUESTIONARY_STYLE_SELECT = _accented(
    "ansigreen",
    selected="bold ansigreen",
    checkbox="ansibrightblack",
    checkbox_selected="bold ansigreen",
)

# Full discovery probes ~150 names; the prompt reads as a warning.
QUESTIONARY_STYLE_CONFIRM = _accented("ansiyellow")

# Password entry; the typed answer is masked by questionary.
QUESTIONARY_STYLE_SECRET = _accented("ansicyan", answer="ansibrightblack")
