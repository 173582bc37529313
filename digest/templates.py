"""
Jinja2 templates for the digest emails.

All three emails extend BASE, which carries the styles, the header and
the footer links. Autoescaping is on, so contact data goes into the
templates unescaped.
"""

from jinja2 import DictLoader, Environment

CALENDAR_URL = "https://outlook.office.com/calendar/"
CONTACTS_URL = "https://outlook.office.com/people/"

BASE = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<style>
  .email-container { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    max-width: 600px; margin: 0 auto; padding: 20px; background-color: #ffffff; border-radius: 8px; }
  .header { text-align: center; margin-bottom: 30px; }
  .title { color: #1a1a1a; font-size: 24px; font-weight: bold; margin: 10px 0; }
  .subtitle { color: #666; font-size: 16px; margin: 10px 0; }
  .section { margin: 20px 0; padding: 15px; background: #f8f9fa; border-radius: 6px; }
  .section-title { color: #2c3e50; font-size: 18px; margin-bottom: 15px;
    border-bottom: 2px solid #e9ecef; padding-bottom: 5px; }
  .birthday-list { list-style: none; padding: 0; margin: 0; }
  .birthday-item { padding: 10px; margin: 5px 0; border-left: 4px solid #007bff; background: white; }
  .contact-info { margin-top: 5px; font-size: 14px; color: #666; }
  .action-buttons { margin-top: 15px; text-align: center; }
  .button { display: inline-block; padding: 8px 16px; margin: 0 5px; background-color: #007bff;
    color: white; text-decoration: none; border-radius: 4px; font-size: 14px; }
  .footer { margin-top: 30px; padding-top: 20px; border-top: 1px solid #eaeaea;
    text-align: center; font-size: 12px; color: #666; }
  .footer a { color: #007bff; text-decoration: none; }
</style>
</head>
<body>
<div class="email-container">
  <div class="header">
    <h1 class="title">{{ title }}</h1>
    {% if subtitle %}
    <p class="subtitle">{{ subtitle }}</p>
    {% endif %}
  </div>
{% block content %}{% endblock %}
  <div class="footer">
    <p>{{ s.footer }} • <a href="{{ calendar_url }}">{{ s.open_calendar }}</a> • <a href="{{ contacts_url }}">{{ s.open_contacts }}</a></p>
  </div>
</div>
</body>
</html>
"""

DAILY = """{% extends "base.html" %}
{% block content %}
  <div class="section">
    <p>{{ greeting }}</p>
    <p>{{ intro }}</p>
  </div>
  <div class="section">
    <h3 class="section-title">{{ s.daily_today }}</h3>
    <ul class="birthday-list">
    {% for item in today %}
      <li class="birthday-item"><strong>{{ item.contact.name }}</strong>{% if item.age %} - {{ item.age }}{% endif %}
        <div class="contact-info">
          {% if item.contact.email %}
          📧 <a href="mailto:{{ item.contact.email }}" class="button">{{ s.send_mail }}</a>
          {% endif %}
          {% if item.contact.phone_number %}
          📱 <a href="tel:{{ item.contact.phone_number }}" class="button">{{ s.call }}</a>
          {% if item.messaging_link %}
          💬 <a href="{{ item.messaging_link }}" class="button">WhatsApp</a>
          {% endif %}
          {% endif %}
          {% for handle, link in item.social %}
          📸 <a href="{{ link }}" class="button">@{{ handle }}</a>
          {% endfor %}
          {% if item.contact.labels %}
          {{ item.contact.labels | join(", ") }}
          {% endif %}
        </div>
      </li>
    {% endfor %}
    </ul>
  </div>
  {% if upcoming %}
  <div class="section">
    <h3 class="section-title">{{ s.daily_upcoming }}</h3>
    <p>{{ upcoming_intro }}</p>
    <ul class="birthday-list">
    {% for item in upcoming %}
      <li class="birthday-item"><strong>{{ item.contact.name }}</strong> - {{ item.when }}
        <div class="contact-info">
          {% if item.contact.email %}📧 {{ item.contact.email }}{% endif %}
          {% if item.contact.phone_number %}📱 {{ item.contact.phone_number }}{% endif %}
        </div>
      </li>
    {% endfor %}
    </ul>
  </div>
  {% endif %}
  <div class="action-buttons">
    <a href="{{ calendar_url }}" class="button">{{ s.open_calendar }}</a>
    <a href="{{ contacts_url }}" class="button">{{ s.open_contacts }}</a>
  </div>
{% endblock %}
"""

MONTHLY = """{% extends "base.html" %}
{% block content %}
  <p>{{ greeting }}</p>
  <p>{{ intro }}</p>
  <p>{{ count }}</p>
  <ul style="list-style-type: none; padding: 0;">
  {% for item in items %}
    <li><b>{{ item.date }}</b>: 🎂 {{ item.name }}{% if item.turns %} ({{ item.turns }}){% endif %}</li>
  {% endfor %}
  </ul>
{% endblock %}
"""

CHANGES = """{% extends "base.html" %}
{% block content %}
  <p>{{ greeting }}</p>
  <p>{{ s.changes_intro }}</p>
  {% for title, changes in sections if changes.has_changes() %}
  <h4>{{ title }}</h4>
  {% for label, identifiers in [(s.changes_created, changes.created), (s.changes_updated, changes.updated)] if identifiers %}
  <p>{{ label }}:</p>
  <ul>
    {% for identifier in identifiers %}
    <li>{{ identifier }}</li>
    {% endfor %}
  </ul>
  {% endfor %}
  {% endfor %}
{% endblock %}
"""

env = Environment(
    loader=DictLoader({
        "base.html": BASE,
        "daily.html": DAILY,
        "monthly.html": MONTHLY,
        "changes.html": CHANGES,
    }),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def greeting(recipient_name: str, s: dict) -> str:
    return f"{s['hello']} {recipient_name}," if recipient_name else f"{s['hello']},"


def render(name: str, s: dict, title: str, subtitle: str = "", **context) -> str:
    return env.get_template(name).render(
        s=s,
        title=title,
        subtitle=subtitle,
        calendar_url=CALENDAR_URL,
        contacts_url=CONTACTS_URL,
        **context,
    )
