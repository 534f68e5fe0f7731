"""Static language catalog: code → display name and flag.

Two kinds of codes live here:
  - target codes offered in the language picker (EN-US, PT-BR, ...)
  - detected base codes the API and the heuristic detector report (EN, PT, ...)

Both sets are accepted as a target by validation. Every code the detector
can emit and every base code the API reports has a display entry, so a
detected label never falls through to the raw code.
"""

from __future__ import annotations

from dataclasses import dataclass

AUTO = "AUTO"
UNKNOWN_FLAG = "\U0001F310"


@dataclass(frozen=True)
class LanguageInfo:
    code: str
    name: str
    flag: str

    @property
    def base_code(self) -> str:
        """EN-US → EN, PT-BR → PT, ES → ES."""
        return self.code.split("-", 1)[0]


TARGET_LANGUAGES: tuple[LanguageInfo, ...] = (
    LanguageInfo("EN-US", "English (US)", "\U0001F1FA\U0001F1F8"),
    LanguageInfo("EN-GB", "English (UK)", "\U0001F1EC\U0001F1E7"),
    LanguageInfo("ES", "Spanish", "\U0001F1EA\U0001F1F8"),
    LanguageInfo("FR", "French", "\U0001F1EB\U0001F1F7"),
    LanguageInfo("DE", "German", "\U0001F1E9\U0001F1EA"),
    LanguageInfo("IT", "Italian", "\U0001F1EE\U0001F1F9"),
    LanguageInfo("PT-PT", "Portuguese (Portugal)", "\U0001F1F5\U0001F1F9"),
    LanguageInfo("PT-BR", "Portuguese (Brazil)", "\U0001F1E7\U0001F1F7"),
    LanguageInfo("RU", "Russian", "\U0001F1F7\U0001F1FA"),
    LanguageInfo("JA", "Japanese", "\U0001F1EF\U0001F1F5"),
    LanguageInfo("ZH", "Chinese (Simplified)", "\U0001F1E8\U0001F1F3"),
    LanguageInfo("KO", "Korean", "\U0001F1F0\U0001F1F7"),
    LanguageInfo("NL", "Dutch", "\U0001F1F3\U0001F1F1"),
    LanguageInfo("PL", "Polish", "\U0001F1F5\U0001F1F1"),
    LanguageInfo("SV", "Swedish", "\U0001F1F8\U0001F1EA"),
    LanguageInfo("DA", "Danish", "\U0001F1E9\U0001F1F0"),
    LanguageInfo("NO", "Norwegian", "\U0001F1F3\U0001F1F4"),
    LanguageInfo("FI", "Finnish", "\U0001F1EB\U0001F1EE"),
)

# Base codes reported as detected_source_language that have no plain target entry.
DETECTED_ONLY_LANGUAGES: tuple[LanguageInfo, ...] = (
    LanguageInfo("EN", "English", "\U0001F1FA\U0001F1F8"),
    LanguageInfo("PT", "Portuguese", "\U0001F1F5\U0001F1F9"),
)

# Fallback when the live /languages call fails.
DEFAULT_REMOTE_LANGUAGES: tuple[LanguageInfo, ...] = (
    LanguageInfo("EN-US", "English (American)", "\U0001F1FA\U0001F1F8"),
    LanguageInfo("ES", "Spanish", "\U0001F1EA\U0001F1F8"),
    LanguageInfo("FR", "French", "\U0001F1EB\U0001F1F7"),
    LanguageInfo("DE", "German", "\U0001F1E9\U0001F1EA"),
    LanguageInfo("IT", "Italian", "\U0001F1EE\U0001F1F9"),
    LanguageInfo("PT-PT", "Portuguese", "\U0001F1F5\U0001F1F9"),
    LanguageInfo("RU", "Russian", "\U0001F1F7\U0001F1FA"),
    LanguageInfo("JA", "Japanese", "\U0001F1EF\U0001F1F5"),
    LanguageInfo("ZH", "Chinese", "\U0001F1E8\U0001F1F3"),
)


class LanguageCatalog:
    """Read-only lookups over the static language tables."""

    def __init__(
        self,
        targets: tuple[LanguageInfo, ...] = TARGET_LANGUAGES,
        detected_only: tuple[LanguageInfo, ...] = DETECTED_ONLY_LANGUAGES,
    ) -> None:
        self._targets = targets
        self._by_code = {lang.code: lang for lang in (*targets, *detected_only)}

    @property
    def targets(self) -> tuple[LanguageInfo, ...]:
        return self._targets

    def codes(self) -> frozenset[str]:
        """Every code accepted as a target or reported as a detected label."""
        return frozenset(self._by_code)

    def detected_codes(self) -> frozenset[str]:
        """Base codes a translation can report as its source language."""
        return frozenset(lang.base_code for lang in self._by_code.values())

    def is_supported(self, code: str | None) -> bool:
        if not code or not code.strip():
            return False
        return code.strip().upper() in self._by_code

    def get(self, code: str) -> LanguageInfo | None:
        return self._by_code.get(code.strip().upper())

    def name_for(self, code: str) -> str:
        """Display name, or the code itself when unknown."""
        lang = self.get(code)
        return lang.name if lang else code

    def flag_for(self, code: str) -> str:
        lang = self.get(code)
        return lang.flag if lang else UNKNOWN_FLAG


catalog = LanguageCatalog()
