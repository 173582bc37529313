"""
Sends digest emails through Microsoft Graph sendMail.
Requires the Mail.Send scope (see auth/graph_auth.py).
"""

import logging

from birthdays.errors import ProviderError
from sources import ms_graph

log = logging.getLogger(__name__)


class GraphMailer:

    def send(self, to: str, from_addr: str, sender_name: str, subject: str,
             text_body: str, html_body: str) -> bool:
        """Graph takes a single body; HTML wins when both are given."""
        if html_body:
            body = {"contentType": "html", "content": html_body}
        else:
            body = {"contentType": "text", "content": text_body}
        message = {
            "subject": subject,
            "body": body,
            "toRecipients": [{"emailAddress": {"address": to}}],
        }
        if from_addr:
            message["from"] = {"emailAddress": {"address": from_addr, "name": sender_name}}
        try:
            ms_graph.post(f"{ms_graph.user_base()}/sendMail", {"message": message, "saveToSentItems": False})
        except ProviderError as e:
            raise RuntimeError(f"Mail delivery failed: {e}") from e
        log.info(f"Mail '{subject}' sent to {to}")
        return True
