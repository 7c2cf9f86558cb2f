"""
Itinerary Notifier - Renders the selected itinerary as an HTML report and emails it
"""

import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Optional, Sequence

from itinerary_planner.core.exceptions import NotificationFailure
from itinerary_planner.core.timeutils import format_duration
from itinerary_planner.models.flight import Itinerary

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Flight Itinerary"


def _format_time(dt) -> str:
    return dt.strftime("%Y-%m-%d %H:%M UTC")


def format_itinerary_email(sequence: Sequence[str], itinerary: Itinerary) -> str:
    """
    Render a planned itinerary as an HTML email body

    Args:
        sequence: Destinations in visiting order
        itinerary: Itinerary for that sequence

    Returns:
        HTML string with sequence, per-leg details and totals
    """
    flight_sequence = " → ".join(escape(code) for code in sequence)

    flight_details = []
    for leg in itinerary.legs:
        flight_details.append(f"""
        <li>
          <strong>{escape(leg.airline)} {escape(leg.flight_number)}</strong><br>
          <strong>Departure:</strong> {_format_time(leg.departure_time)} ({escape(leg.origin)})<br>
          <strong>Arrival:</strong> {_format_time(leg.arrival_time)} ({escape(leg.destination)})<br>
          <strong>Duration:</strong> {format_duration(leg.duration)}<br>
          <strong>Cost:</strong> ${leg.cost:.2f}<br>
          <strong>Layover:</strong> {format_duration(leg.layover)} at {escape(leg.layover_iata)}<br>
        </li>
      """)

    summary = f"""
      <ul>
        <li><strong>Total Flight Duration:</strong> {format_duration(itinerary.total_flight_duration)}</li>
        <li><strong>Total Layover Duration:</strong> {format_duration(itinerary.total_layover_duration)}</li>
        <li><strong>Total Travel Time:</strong> {format_duration(itinerary.total_travel_time)}</li>
        <li><strong>Total Cost:</strong> ${itinerary.total_cost:.2f}</li>
      </ul>
    """

    return f"""
      <h1>Flight Itinerary</h1>
      <h2>Flight Sequence</h2>
      <p>{flight_sequence}</p>

      <h2>Flight Details</h2>
      <ul>{"".join(flight_details)}</ul>

      <h2>Summary</h2>
      {summary}
    """


class EmailNotifier:
    """
    Sends HTML reports through an SMTP-over-SSL account
    """

    def __init__(
        self,
        sender: Optional[str],
        password: Optional[str],
        host: str = "smtp.gmail.com",
        port: int = 465,
        timeout: int = 30
    ):
        self.sender = sender
        self.password = password
        self.host = host
        self.port = port
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.sender and self.password)

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        """
        Deliver one HTML email

        Raises:
            NotificationFailure: Account not configured or SMTP delivery failed
        """
        if not self.is_configured():
            raise NotificationFailure("Email account not configured (set EMAIL_ADDRESS and EMAIL_PASSWORD)")
        if "@" not in recipient:
            raise NotificationFailure(f"Invalid recipient address '{recipient}'")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content("This itinerary is best viewed in an HTML-capable mail client.")
        message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.login(self.sender, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationFailure(f"Failed to send email to {recipient}: {str(e)}") from e

        logger.info(f"Email sent successfully: {recipient}")


# Singleton pattern for easy reuse
_notifier_instance: Optional[EmailNotifier] = None


def get_email_notifier() -> EmailNotifier:
    """Get singleton notifier built from Settings"""
    global _notifier_instance

    if _notifier_instance is None:
        from itinerary_planner.core.config import get_settings
        settings = get_settings()

        _notifier_instance = EmailNotifier(
            settings.email_address,
            settings.email_password,
            host=settings.smtp_host,
            port=settings.smtp_port,
            timeout=settings.api_timeout
        )

    return _notifier_instance
