"""Heuristic source-language detection.

Scores text against a constant per-language pattern table. The result is a
hint only: it lets the orchestrator skip a no-op "source equals target"
call and gives a display label when the API does not report one. It is
never sent to the API as source_lang.

Score per language:
    3 × common function words (matched with surrounding spaces)
  + 5 × specific vocabulary words (substring)
  + 2 × special characters present
  + 1 × characteristic suffixes present (substring)

The best score wins if it reaches MIN_SCORE; ties go to the language that
comes first in LANGUAGE_PATTERNS.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import structlog

from deepl_translator.services.language.catalog import AUTO

logger = structlog.get_logger(__name__)

COMMON_WORD_WEIGHT = 3
SPECIFIC_WORD_WEIGHT = 5
SPECIAL_CHAR_WEIGHT = 2
SUFFIX_WEIGHT = 1
MIN_SCORE = 1


@dataclass(frozen=True)
class LanguagePattern:
    common_words: frozenset[str]
    specific_words: frozenset[str]
    special_chars: frozenset[str]
    suffix_patterns: frozenset[str]

    def score(self, padded_text: str) -> int:
        """Score text that is already lower-cased and padded with spaces."""
        common = sum(1 for w in self.common_words if f" {w} " in padded_text)
        specific = sum(1 for w in self.specific_words if w in padded_text)
        chars = sum(1 for c in self.special_chars if c in padded_text)
        suffixes = sum(1 for s in self.suffix_patterns if s in padded_text)
        return (
            common * COMMON_WORD_WEIGHT
            + specific * SPECIFIC_WORD_WEIGHT
            + chars * SPECIAL_CHAR_WEIGHT
            + suffixes * SUFFIX_WEIGHT
        )


def _pattern(common: str, specific: list[str], chars: str, suffixes: str) -> LanguagePattern:
    return LanguagePattern(
        common_words=frozenset(common.split()),
        specific_words=frozenset(specific),
        special_chars=frozenset(chars),
        suffix_patterns=frozenset(suffixes.split()),
    )


# Order matters: it breaks ties.
LANGUAGE_PATTERNS: Mapping[str, LanguagePattern] = MappingProxyType(
    {
        "ES": _pattern(
            "el la de que en es se con por para una del",
            [
                "hola", "adiós", "gracias", "por favor", "buenos días",
                "buenas tardes", "buenas noches", "sí", "no", "muy", "bien",
                "mal", "casa", "agua", "comida", "tiempo", "persona", "año",
                "día", "vida", "mundo", "trabajo", "familia", "amigo", "amor",
                "dinero", "país", "ciudad", "nombre", "parte", "lugar", "caso",
                "forma", "manera", "momento", "vez", "hora", "mano", "ojo",
                "cabeza", "corazón", "palabra", "pregunta", "respuesta",
                "problema", "solución",
            ],
            "ñ¿¡áéíóú",
            "ción dad mente ando iendo ado ido",
        ),
        "FR": _pattern(
            "le la de et est dans avec pour que une des du",
            [
                "bonjour", "bonsoir", "salut", "merci", "au revoir", "oui",
                "non", "très", "bien", "mal", "maison", "eau", "nourriture",
                "temps", "personne", "année", "jour", "vie", "monde", "travail",
                "famille", "ami", "amour", "argent", "pays", "ville", "nom",
                "partie", "lieu", "cas", "forme", "manière", "moment", "fois",
                "heure", "main", "œil", "tête", "cœur", "mot", "question",
                "réponse", "problème", "solution",
            ],
            "çàéèêëîïôùûüÿ",
            "tion ment ique ant ent é er",
        ),
        "DE": _pattern(
            "der die das und ist mit von zu auf für ein eine",
            [
                "hallo", "guten tag", "auf wiedersehen", "danke", "bitte", "ja",
                "nein", "sehr", "gut", "schlecht", "haus", "wasser", "essen",
                "zeit", "person", "jahr", "tag", "leben", "welt", "arbeit",
                "familie", "freund", "liebe", "geld", "land", "stadt", "name",
                "teil", "ort", "fall", "form", "weise", "moment", "mal",
                "stunde", "hand", "auge", "kopf", "herz", "wort", "frage",
                "antwort", "problem", "lösung",
            ],
            "äöüß",
            "ung keit lich end ern en er",
        ),
        "IT": _pattern(
            "il la di che con per una del della sono essere",
            [
                "ciao", "buongiorno", "buonasera", "arrivederci", "grazie",
                "prego", "sì", "no", "molto", "bene", "male", "casa", "acqua",
                "cibo", "tempo", "persona", "anno", "giorno", "vita", "mondo",
                "lavoro", "famiglia", "amico", "amore", "denaro", "paese",
                "città", "nome", "parte", "luogo", "caso", "forma", "modo",
                "momento", "volta", "ora", "mano", "occhio", "testa", "cuore",
                "parola", "domanda", "risposta", "problema", "soluzione",
            ],
            "àèéìíîòóùú",
            "zione mente ità ando endo ato ito",
        ),
        "PT": _pattern(
            "o a de que em para com uma do da são ser",
            [
                "olá", "oi", "tchau", "obrigado", "obrigada", "por favor",
                "bom dia", "boa tarde", "boa noite", "sim", "não", "muito",
                "bem", "mal", "casa", "água", "comida", "tempo", "pessoa", "ano",
                "dia", "vida", "mundo", "trabalho", "família", "amigo", "amor",
                "dinheiro", "país", "cidade", "nome", "parte", "lugar", "caso",
                "forma", "maneira", "momento", "vez", "hora", "mão", "olho",
                "cabeça", "coração", "palavra", "pergunta", "resposta",
                "problema", "solução",
            ],
            "ãõçáàâéêíóôú",
            "ção mente dade ando endo ado ido",
        ),
        "EN": _pattern(
            "the and of to in is that for with on are this",
            [
                "hello", "hi", "goodbye", "bye", "thanks", "thank you",
                "please", "yes", "no", "very", "good", "bad", "house", "water",
                "food", "time", "person", "year", "day", "life", "world",
                "work", "family", "friend", "love", "money", "country", "city",
                "name", "part", "place", "case", "form", "way", "moment",
                "once", "hour", "hand", "eye", "head", "heart", "word",
                "question", "answer", "problem", "solution",
            ],
            "",
            "ing tion ness ed er ly",
        ),
        "RU": _pattern(
            "и в не на с что как по за от для",
            [
                "привет", "пока", "спасибо", "пожалуйста", "да", "нет",
                "очень", "хорошо", "плохо", "дом", "вода", "еда", "время",
                "человек", "год", "день", "жизнь", "мир", "работа", "семья",
                "друг", "любовь", "деньги", "страна", "город", "имя", "часть",
                "место", "случай", "форма", "способ", "момент", "раз", "час",
                "рука", "глаз", "голова", "сердце", "слово", "вопрос", "ответ",
                "проблема", "решение",
            ],
            "абвгдеёжзийклмнопрстуфхцчшщъыьэюя",
            "",
        ),
    }
)


class HeuristicLanguageDetector:
    """Best-effort language guess from lexical markers. Pure and stateless."""

    def __init__(
        self,
        patterns: Mapping[str, LanguagePattern] = LANGUAGE_PATTERNS,
        min_score: int = MIN_SCORE,
    ) -> None:
        self._patterns = patterns
        self._min_score = min_score

    @property
    def languages(self) -> tuple[str, ...]:
        return tuple(self._patterns)

    def scores(self, text: str) -> dict[str, int]:
        """Score every candidate language. Empty text scores zero everywhere."""
        normalized = (text or "").strip().lower()
        if not normalized:
            return {code: 0 for code in self._patterns}
        padded = f" {normalized} "
        return {code: pattern.score(padded) for code, pattern in self._patterns.items()}

    def detect(self, text: str) -> str:
        """Return the best-scoring language code, or AUTO when nothing matches."""
        if not text or not text.strip():
            return AUTO

        scores = self.scores(text)
        best_code = max(scores, key=scores.__getitem__)
        best_score = scores[best_code]
        if best_score < self._min_score:
            logger.debug("language_detection_inconclusive", best_score=best_score)
            return AUTO

        logger.debug("language_detected", language=best_code, score=best_score)
        return best_code
