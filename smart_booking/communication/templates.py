"""Render the booking confirmation email (HTML + plain text)."""

from html import escape
from typing import Any

from smart_booking.domain.store import Booking

from .ports import OutgoingEmail

_PRIORITY_COLOURS = {"high": "#ff6b6b", "medium": "#4ecdc4"}
_DEFAULT_PRIORITY_COLOUR = "#95a5a6"

_BADGE = (
    '<div style="text-align: center;"><div style="background: {colour}; color: white;'
    " padding: 8px 12px; border-radius: 20px; font-size: 12px; font-weight: bold;"
    ' text-transform: uppercase;">{label}</div></div>'
)


def _analysis_block(analysis: dict[str, Any] | None) -> str:
    if not isinstance(analysis, dict) or not analysis:
        return ""
    priority = str(analysis.get("priority", ""))
    badges = [
        _BADGE.format(
            colour=_PRIORITY_COLOURS.get(priority, _DEFAULT_PRIORITY_COLOUR),
            label=f"{escape(priority)} Priority",
        ),
        _BADGE.format(
            colour="#667eea",
            label=f"{escape(str(analysis.get('suggestedDuration', '')))} Minutes",
        ),
        _BADGE.format(colour="#51cf66", label=escape(str(analysis.get("sentiment", "")))),
    ]
    return (
        '<div style="background: #f0f4ff; padding: 20px; border-radius: 10px; margin: 20px 0;">'
        '<h3 style="color: #667eea; margin: 0 0 15px 0; font-size: 18px;">AI Analysis Summary</h3>'
        '<div style="display: grid; grid-template-columns: repeat(auto-fit, minmax(150px, 1fr));'
        ' gap: 15px;">'
        + "".join(badges)
        + "</div></div>"
    )


def render_confirmation(booking: Booking, sender_name: str = "Smart Booking Pro") -> OutgoingEmail:
    booking_ref = f"#{booking.booking_id}"
    subject = f"Appointment Confirmed - {sender_name} {booking_ref}"

    html = f"""\
<div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: 0 auto; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 20px; border-radius: 15px;">
  <div style="background: white; padding: 40px; border-radius: 15px;">
    <div style="text-align: center; margin-bottom: 30px;">
      <h1 style="color: #667eea; margin: 0; font-size: 28px;">{escape(sender_name)}</h1>
      <p style="color: #666; margin: 10px 0 0 0; font-size: 16px;">AI-Powered Appointment System</p>
    </div>
    <div style="background: #f8f9ff; padding: 25px; border-radius: 12px; margin: 25px 0; border-left: 5px solid #667eea;">
      <h2 style="color: #333; margin: 0 0 20px 0; font-size: 22px;">Booking Confirmed {booking_ref}</h2>
      <div style="white-space: pre-wrap; line-height: 1.8; color: #444; font-size: 15px;">{escape(booking.email_content)}</div>
    </div>
    {_analysis_block(booking.ai_analysis)}
    <div style="text-align: center; margin-top: 40px; padding-top: 25px; border-top: 2px solid #f0f0f0;">
      <p style="color: #666; font-size: 14px; margin: 0 0 10px 0;">
        Need to reschedule? Simply reply to this email.
      </p>
      <span style="background: #667eea; color: white; padding: 6px 12px; border-radius: 15px; font-size: 12px; font-weight: bold;">
        Booking ID: {booking_ref}
      </span>
    </div>
  </div>
</div>
"""

    text = (
        f"Booking Confirmed {booking_ref}\n\n"
        f"{booking.email_content}\n\n"
        f"Need to reschedule? Simply reply to this email.\n"
        f"Booking ID: {booking_ref}\n"
    )

    return OutgoingEmail(recipient=booking.email, subject=subject, text=text, html=html)
