"""
Locale tables for every string that ends up in a calendar event or email.

Event titles and descriptions double as the idempotency key on the
calendar side, so changing a phrase here makes the next sync rewrite
every event.
"""

from birthdays.errors import ConfigurationError

LOCALES = {
    "de": {
        "months_short": ["Jan", "Feb", "Mär", "Apr", "Mai", "Jun",
                         "Jul", "Aug", "Sep", "Okt", "Nov", "Dez"],
        "months_long": ["Januar", "Februar", "März", "April", "Mai", "Juni",
                        "Juli", "August", "September", "Oktober", "November", "Dezember"],
        "event_title": "🎂 {name} hat Geburtstag",
        "summary_title": "🎉🎂 GEBURTSTAGE 🎂🎉",
        "event_age": "{name} wird heute {age}",
        "event_birthday": "Geburtstag: {date}",
        "event_no_year": "{name} hat heute Geburtstag",
        "summary_header": "Geburtstage im {month}",
        "mail_turns": "wird {age} Jahre",
        "hello": "Hallo",
        "daily_subject": "🎁 Heutige Geburtstage 🎁",
        "daily_title": "🎉 Heutige Geburtstage",
        "daily_intro": "heute haben {count} deiner Kontakte Geburtstag. "
                       "Hier sind alle Details, die du brauchst, um zu gratulieren:",
        "daily_intro_one": "heute hat einer deiner Kontakte Geburtstag. "
                           "Hier sind alle Details, die du brauchst, um zu gratulieren:",
        "daily_today": "🎂 Heute",
        "daily_turns_today": "wird heute {age} Jahre alt!",
        "daily_upcoming": "📅 Kommende Geburtstage",
        "daily_upcoming_intro": "In den nächsten {days} Tagen haben {count} deiner Kontakte Geburtstag:",
        "daily_upcoming_intro_one": "In den nächsten {days} Tagen hat einer deiner Kontakte Geburtstag:",
        "send_mail": "Glückwunsch-Mail senden",
        "call": "Anrufen",
        "monthly_subject": "🎂 Geburtstags Reminder 🎂",
        "monthly_title": "🎉 Geburtstage im {month}",
        "monthly_intro": "Mach dich bereit zum Feiern! Hier sind die Geburtstage deiner "
                         "Kontakte im {month} {year}. Vergiss nicht, ihnen zu gratulieren!",
        "monthly_count": "Insgesamt gibt es {count} Geburtstage in diesem Monat:",
        "monthly_count_one": "Insgesamt gibt es 1 Geburtstag in diesem Monat:",
        "changes_subject": "📅 Geburtstags Updates 📅",
        "changes_title": "🔄 Updates zu Geburtstags-Events",
        "changes_intro": "die folgenden Geburtstags-Events wurden in deinem Kalender angelegt oder aktualisiert:",
        "changes_individual": "Individuelle Geburtstage",
        "changes_summary": "Monatliche Geburtstagsübersichten",
        "changes_created": "✨ Neu",
        "changes_updated": "🔄 Aktualisiert",
        "open_calendar": "Kalender öffnen",
        "open_contacts": "Kontakte verwalten",
        "footer": "Gesendet von Birthday Calendar Sync",
    },
    "en": {
        "months_short": ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                         "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
        "months_long": ["January", "February", "March", "April", "May", "June",
                        "July", "August", "September", "October", "November", "December"],
        "event_title": "🎂 {name}'s birthday",
        "summary_title": "🎉🎂 BIRTHDAYS 🎂🎉",
        "event_age": "{name} turns {age} today",
        "event_birthday": "Birthday: {date}",
        "event_no_year": "{name} has a birthday today",
        "summary_header": "Birthdays in {month}",
        "mail_turns": "turns {age}",
        "hello": "Hello",
        "daily_subject": "🎁 Today's birthdays 🎁",
        "daily_title": "🎉 Today's birthdays",
        "daily_intro": "{count} of your contacts have a birthday today. "
                       "Here is everything you need to congratulate them:",
        "daily_intro_one": "one of your contacts has a birthday today. "
                           "Here is everything you need to congratulate them:",
        "daily_today": "🎂 Today",
        "daily_turns_today": "turns {age} today!",
        "daily_upcoming": "📅 Upcoming birthdays",
        "daily_upcoming_intro": "{count} of your contacts have a birthday in the next {days} days:",
        "daily_upcoming_intro_one": "One of your contacts has a birthday in the next {days} days:",
        "send_mail": "Send congratulations",
        "call": "Call",
        "monthly_subject": "🎂 Birthday reminder 🎂",
        "monthly_title": "🎉 Birthdays in {month}",
        "monthly_intro": "Get ready to celebrate! Here are your contacts' birthdays "
                         "in {month} {year}. Don't forget to congratulate them!",
        "monthly_count": "There are {count} birthdays this month:",
        "monthly_count_one": "There is 1 birthday this month:",
        "changes_subject": "📅 Birthday updates 📅",
        "changes_title": "🔄 Birthday event updates",
        "changes_intro": "the following birthday events were created or updated in your calendar:",
        "changes_individual": "Individual birthdays",
        "changes_summary": "Monthly birthday summaries",
        "changes_created": "✨ New",
        "changes_updated": "🔄 Updated",
        "open_calendar": "Open calendar",
        "open_contacts": "Manage contacts",
        "footer": "Sent by Birthday Calendar Sync",
    },
}

DEFAULT_LANGUAGE = "de"


def strings(language: str = DEFAULT_LANGUAGE) -> dict:
    try:
        return LOCALES[language]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported language '{language}' (choose from {', '.join(sorted(LOCALES))})"
        )


def month_name(month: int, language: str = DEFAULT_LANGUAGE, short: bool = False) -> str:
    """Month name for a 1-based month number."""
    table = strings(language)["months_short" if short else "months_long"]
    return table[month - 1]


def event_title(name: str, language: str = DEFAULT_LANGUAGE) -> str:
    return strings(language)["event_title"].format(name=name)


def summary_title(language: str = DEFAULT_LANGUAGE) -> str:
    return strings(language)["summary_title"]
