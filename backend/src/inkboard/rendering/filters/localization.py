"""Localization filters for dates and common display words.

Month and weekday names are substituted from built-in tables before
``strftime`` runs, so output does not depend on the process locale.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

DEFAULT_LOCALE = "en"

MONTHS = {
    "en": ["January", "February", "March", "April", "May", "June", "July", "August", "September", "October", "November", "December"],
    "de": ["Januar", "Februar", "März", "April", "Mai", "Juni", "Juli", "August", "September", "Oktober", "November", "Dezember"],
    "fr": ["janvier", "février", "mars", "avril", "mai", "juin", "juillet", "août", "septembre", "octobre", "novembre", "décembre"],
    "es": ["enero", "febrero", "marzo", "abril", "mayo", "junio", "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre"],
    "nl": ["januari", "februari", "maart", "april", "mei", "juni", "juli", "augustus", "september", "oktober", "november", "december"],
}

WEEKDAYS = {
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
    "de": ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"],
    "fr": ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"],
    "es": ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"],
    "nl": ["maandag", "dinsdag", "woensdag", "donderdag", "vrijdag", "zaterdag", "zondag"],
}

WORDS = {
    "de": {"today": "heute", "tomorrow": "morgen", "yesterday": "gestern", "now": "jetzt", "week": "Woche", "day": "Tag", "hour": "Stunde", "minute": "Minute"},
    "fr": {"today": "aujourd'hui", "tomorrow": "demain", "yesterday": "hier", "now": "maintenant", "week": "semaine", "day": "jour", "hour": "heure", "minute": "minute"},
    "es": {"today": "hoy", "tomorrow": "mañana", "yesterday": "ayer", "now": "ahora", "week": "semana", "day": "día", "hour": "hora", "minute": "minuto"},
    "nl": {"today": "vandaag", "tomorrow": "morgen", "yesterday": "gisteren", "now": "nu", "week": "week", "day": "dag", "hour": "uur", "minute": "minuut"},
}


def _language(locale: str | None) -> str:
    lang = (locale or DEFAULT_LOCALE).replace("-", "_").split("_")[0].lower()
    return lang if lang in MONTHS else DEFAULT_LOCALE


def _coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, UTC)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.lower() == "now":
            return datetime.now(UTC)
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def l_date(value: Any, fmt: str = "%Y-%m-%d", locale: str | None = None) -> Any:
    """Format a date/datetime/ISO string/epoch with localized month and day names."""
    moment = _coerce_datetime(value)
    if moment is None:
        return value
    lang = _language(locale)
    month = MONTHS[lang][moment.month - 1]
    weekday = WEEKDAYS[lang][moment.weekday()]
    localized = (
        fmt.replace("%%", "\0")
        .replace("%B", month)
        .replace("%b", month[:3])
        .replace("%A", weekday)
        .replace("%a", weekday[:3])
        .replace("\0", "%%")
    )
    return moment.strftime(localized)


def l_word(word: Any, locale: str | None = None) -> Any:
    """Translate a small set of common display words; unknown words pass through."""
    if not isinstance(word, str):
        return word
    table = WORDS.get(_language(locale), {})
    translated = table.get(word.lower())
    if translated is None:
        return word
    return translated.capitalize() if word[:1].isupper() else translated


FILTERS = {
    "l_date": l_date,
    "l_word": l_word,
}
